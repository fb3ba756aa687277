from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from edge_guardian.dependencies import get_settings
from edge_guardian.routers import ai_config, alerts
from edge_guardian.utils.logging_config import configure_logging

settings = get_settings()  # loads .env
configure_logging(settings.log_level)

app = FastAPI(title="Edge Guardian Alert API", version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(alerts.router)
app.include_router(ai_config.router)


@app.get("/health")
async def health_check() -> dict:
    return {"status": "ok"}
