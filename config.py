import os
from typing import List


def _flag(name: str, default: bool) -> bool:
    raw = os.getenv(name, "").strip().lower()
    if not raw:
        return default
    return raw in ("1", "true", "yes", "on")


def base_url() -> str:
    return os.getenv("BASE_URL", "http://localhost:8000").rstrip("/")


def strict_crop_transitions() -> bool:
    return _flag("STRICT_CROP_TRANSITIONS", False)


def seed_sample_data() -> bool:
    return _flag("SEED_SAMPLE_DATA", True)


def log_level() -> str:
    return os.getenv("LOG_LEVEL", "INFO").strip() or "INFO"


def log_file() -> str:
    return os.getenv("LOG_FILE", "").strip()


def cors_origins() -> List[str]:
    raw = os.getenv("CORS_ORIGINS", "*")
    return [o.strip() for o in raw.split(",") if o.strip()] or ["*"]
