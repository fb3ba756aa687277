"""
Email delivery for generated alerts.

Port 465 uses implicit TLS (SMTP_SSL); any other port connects in plain text
and upgrades with STARTTLS when the server offers it.
"""

from __future__ import annotations

import asyncio
import html
import logging
import re
import smtplib
from email.mime.image import MIMEImage
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

from edge_guardian.config import SmtpSettings
from edge_guardian.core.errors import NotificationError
from edge_guardian.schemas.alert import Alert
from edge_guardian.utils.data_uri import decode_data_uri, is_data_uri

logger = logging.getLogger(__name__)

IMPLICIT_TLS_PORT = 465
IMAGE_CID = "incidentImage"
SENDER_NAME = "Edge Guardian Alert"

EMAIL_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="UTF-8">
  <title>Emergency Alert: {emergency_type}</title>
  <style>
    body {{ font-family: -apple-system, 'Segoe UI', Roboto, Helvetica, Arial, sans-serif; margin: 0; background-color: #f8f9fa; color: #343a40; }}
    .container {{ max-width: 600px; margin: 20px auto; background-color: #ffffff; border-radius: 8px; border: 1px solid #dee2e6; }}
    .header {{ background-color: #343a40; color: #ffffff; padding: 20px; text-align: center; }}
    .content {{ padding: 20px; }}
    .alert-message {{ font-size: 18px; font-weight: 500; margin-bottom: 20px; }}
    .detail-item {{ background-color: #f1f3f5; padding: 15px; border-radius: 6px; margin-bottom: 15px; }}
    .detail-item strong {{ display: block; margin-bottom: 5px; }}
    .severity {{ padding: 5px 10px; border-radius: 9999px; color: #ffffff; font-weight: 600; text-transform: capitalize; }}
    .image-container img {{ max-width: 100%; border-radius: 6px; }}
    .footer {{ background-color: #f1f3f5; padding: 15px; text-align: center; font-size: 12px; color: #6c757d; }}
  </style>
</head>
<body>
  <div class="container">
    <div class="header"><h1>Emergency Alert</h1></div>
    <div class="content">
      <p class="alert-message">{alert_message}</p>
      <div class="detail-item"><strong>Severity</strong>
        <span class="severity" style="background-color: {severity_color};">{severity}</span></div>
      <div class="detail-item"><strong>Emergency Type</strong>
        <span style="text-transform: capitalize;">{emergency_type}</span></div>
      <div class="detail-item"><strong>Location</strong>{location}</div>
      <div class="detail-item"><strong>Recommended Actions</strong>{recommended_actions}</div>
      <div class="image-container"><strong>Incident Image</strong><br />
        <img src="{image_src}" alt="Incident Image"></div>
    </div>
    <div class="footer">This is an automated alert from Edge Guardian.</div>
  </div>
</body>
</html>
"""


def severity_color(severity: str) -> str:
    level = severity.lower()
    if level == "high":
        return "#dc2626"
    if level == "medium":
        return "#f59e0b"
    return "#22c55e"


def render_alert_email(alert: Alert) -> str:
    image_src = f"cid:{IMAGE_CID}" if is_data_uri(alert.image_url) else alert.image_url.strip()
    return EMAIL_TEMPLATE.format(
        emergency_type=html.escape(alert.emergency_type),
        alert_message=html.escape(alert.alert_message),
        severity_color=severity_color(alert.severity),
        severity=html.escape(alert.severity),
        location=html.escape(alert.location_details or alert.location),
        recommended_actions=html.escape(alert.recommended_actions),
        image_src=html.escape(image_src, quote=True),
    )


def alert_subject(alert: Alert) -> str:
    kind = alert.emergency_type[:1].upper() + alert.emergency_type[1:]
    return f"❗ Emergency Alert: {kind} Detected"


def split_recipients(recipients: str) -> list[str]:
    return [part.strip() for part in re.split(r"[,;]", recipients) if part.strip()]


class AlertNotifier:
    def __init__(self, smtp: SmtpSettings):
        self.smtp = smtp
        if not smtp.is_configured():
            logger.warning(
                "SMTP environment variables are not fully configured. "
                "Email notifications will fail until SMTP_HOST, SMTP_PORT, SMTP_USER and SMTP_PASS are set."
            )

    def build_message(self, alert: Alert, recipients: str) -> MIMEMultipart:
        msg = MIMEMultipart("related")
        msg["Subject"] = alert_subject(alert)
        msg["From"] = f'"{SENDER_NAME}" <{self.smtp.user}>'
        msg["To"] = recipients
        msg.attach(MIMEText(render_alert_email(alert), "html"))

        if is_data_uri(alert.image_url):
            image_bytes, content_type = decode_data_uri(alert.image_url)
            subtype = content_type.split("/", 1)[-1] if "/" in content_type else "jpeg"
            image = MIMEImage(image_bytes, _subtype=subtype, name="incident.jpg")
            image.add_header("Content-ID", f"<{IMAGE_CID}>")
            image.add_header("Content-Disposition", "inline", filename="incident.jpg")
            msg.attach(image)
        return msg

    def _send_sync(self, alert: Alert, recipients: str) -> None:
        msg = self.build_message(alert, recipients)
        to_addrs = split_recipients(recipients)
        if self.smtp.port == IMPLICIT_TLS_PORT:
            server = smtplib.SMTP_SSL(self.smtp.host, self.smtp.port)
        else:
            server = smtplib.SMTP(self.smtp.host, self.smtp.port)
        with server:
            if self.smtp.port != IMPLICIT_TLS_PORT:
                server.ehlo()
                if server.has_extn("starttls"):
                    server.starttls()
                    server.ehlo()
            server.login(self.smtp.user, self.smtp.password)
            server.sendmail(self.smtp.user, to_addrs, msg.as_string())

    async def send_alert(self, alert: Alert, recipients: str) -> None:
        if not self.smtp.is_configured():
            raise NotificationError("SMTP service is not configured on the server.")
        try:
            await asyncio.to_thread(self._send_sync, alert, recipients)
        except (smtplib.SMTPException, OSError, ValueError) as exc:
            logger.error("Error sending email: %s", exc)
            raise NotificationError("Failed to send email via SMTP.") from exc
        logger.info("Alert %s emailed to %s", alert.id, recipients)
