import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

load_dotenv(Path(__file__).resolve().parent / ".env")


@dataclass(frozen=True)
class DecoderSettings:
    strict: bool
    log_level: str
    indent: int


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def load_settings() -> DecoderSettings:
    """Load decoder settings from the environment with sensible defaults."""

    return DecoderSettings(
        strict=_env_bool("CATENA_STRICT", True),
        log_level=os.getenv("CATENA_LOG_LEVEL", "WARNING").strip().upper(),
        indent=int(os.getenv("CATENA_INDENT", "0")),
    )
