"""Process settings read from the environment (and a local ``.env`` file)."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

BASE_DIR = Path(__file__).resolve().parent.parent


def _int(value: Optional[str], default: int) -> int:
    if value is None or value == "":
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _optional(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


@dataclass(frozen=True)
class Settings:
    mongo_uri: Optional[str]
    mongo_db: str
    mongo_collection: str
    records_path: str
    dialogue_url: Optional[str]
    dialogue_token: Optional[str]
    imgur_client_id: Optional[str]
    chart_output_dir: str
    vocabulary_path: Optional[str]
    request_timeout_sec: int


def get_settings(env_file: Optional[Path] = None) -> Settings:
    load_dotenv(env_file or BASE_DIR / ".env")
    return Settings(
        mongo_uri=_optional(os.getenv("MONGO_URI")),
        mongo_db=os.getenv("MONGO_DB", "clinical"),
        mongo_collection=os.getenv("MONGO_COLLECTION", "patients"),
        records_path=os.getenv("RECORDS_PATH", str(BASE_DIR / "static" / "records.json")),
        dialogue_url=_optional(os.getenv("DIALOGUE_URL")),
        dialogue_token=_optional(os.getenv("DIALOGUE_TOKEN")),
        imgur_client_id=_optional(os.getenv("IMGUR_CLIENT_ID")),
        chart_output_dir=os.getenv("CHART_OUTPUT_DIR", str(BASE_DIR / "static" / "charts")),
        vocabulary_path=_optional(os.getenv("VOCABULARY_PATH")),
        request_timeout_sec=_int(os.getenv("REQUEST_TIMEOUT_SEC"), 10),
    )


__all__ = ["Settings", "get_settings"]
