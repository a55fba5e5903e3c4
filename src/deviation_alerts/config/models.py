# src/deviation_alerts/config/models.py

# --- Built Ins  ---
import os
from typing import Mapping, Optional

# --- Installed  ---
from loguru import logger as log
from pydantic import BaseModel, Field

DEFAULT_SERVER_PORT = 7777


class ServerSettings(BaseModel):
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=DEFAULT_SERVER_PORT, gt=0, lt=65536)


class ExchangeSettings(BaseModel):
    rest_url: str = Field(default="https://api.gemini.com")
    request_timeout_s: float = Field(
        default=10.0,
        gt=0,
        description="Total timeout for a single upstream ticker call.",
    )


class PacingSettings(BaseModel):
    batch_size: int = Field(
        default=10,
        gt=0,
        description="A pacing delay is inserted before every Nth dispatched symbol.",
    )
    pacing_delay_s: float = Field(
        default=1.0,
        ge=0,
        description="Seconds to pause before each paced dispatch; 0 disables pacing.",
    )


class AppSettings(BaseModel):
    server: ServerSettings = Field(default_factory=ServerSettings)
    exchange: ExchangeSettings = Field(default_factory=ExchangeSettings)
    pacing: PacingSettings = Field(default_factory=PacingSettings)
    log_level: str = Field(default="INFO")


def load_settings(environ: Optional[Mapping[str, str]] = None) -> AppSettings:
    """
    Builds AppSettings from environment variables.

    Unset variables fall back to the model defaults. Malformed values surface as
    a pydantic ValidationError so the process fails before it starts serving.
    """
    env = os.environ if environ is None else environ

    server = {}
    if env.get("SERVER_HOST"):
        server["host"] = env["SERVER_HOST"]
    if env.get("SERVER_PORT"):
        server["port"] = env["SERVER_PORT"]
    else:
        log.info(f"SERVER_PORT environment variable not set, defaulting to {DEFAULT_SERVER_PORT}")

    exchange = {}
    if env.get("GEMINI_REST_URL"):
        exchange["rest_url"] = env["GEMINI_REST_URL"].rstrip("/")
    if env.get("UPSTREAM_TIMEOUT_S"):
        exchange["request_timeout_s"] = env["UPSTREAM_TIMEOUT_S"]

    pacing = {}
    if env.get("PACING_BATCH_SIZE"):
        pacing["batch_size"] = env["PACING_BATCH_SIZE"]
    if env.get("PACING_DELAY_S"):
        pacing["pacing_delay_s"] = env["PACING_DELAY_S"]

    return AppSettings(
        server=ServerSettings(**server),
        exchange=ExchangeSettings(**exchange),
        pacing=PacingSettings(**pacing),
        log_level=env.get("LOG_LEVEL", "INFO").upper(),
    )
