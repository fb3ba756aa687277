import secrets
import time
from typing import Optional

from edge_guardian.schemas.alert import Alert, AlertDraft


def new_alert_id(now_ms: Optional[int] = None) -> str:
    """'<epoch ms>-<8 hex chars>'; collisions are unlikely, not impossible."""
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    return f"{now_ms}-{secrets.token_hex(4)}"


def assemble_alert(
    draft: AlertDraft,
    image_url: str,
    location: str,
    captured_at: Optional[int] = None,
) -> Alert:
    now_ms = int(time.time() * 1000)
    return Alert(
        **draft.model_dump(),
        id=new_alert_id(now_ms),
        timestamp=captured_at if captured_at is not None else now_ms,
        image_url=image_url,
        location=location,
    )
