import os
from typing import Mapping, Optional

from pydantic import BaseModel, ConfigDict

DEFAULT_PIXEL_ID = "1361850507693201"
API_VERSION = "v18.0"
GRAPH_BASE_URL = "https://graph.facebook.com"


class Settings(BaseModel):
    """Process-wide configuration, built once at startup and never mutated."""

    model_config = ConfigDict(frozen=True)

    pixel_id: str = DEFAULT_PIXEL_ID
    access_token: Optional[str] = None
    api_version: str = API_VERSION
    test_event_code: Optional[str] = None
    log_level: str = "INFO"

    @property
    def configured(self) -> bool:
        return bool(self.access_token)

    @property
    def events_url(self) -> str:
        return f"{GRAPH_BASE_URL}/{self.api_version}/{self.pixel_id}/events"


def _read(environ: Mapping[str, str], key: str) -> Optional[str]:
    value = (environ.get(key) or "").strip()
    return value or None


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    environ = os.environ if environ is None else environ
    return Settings(
        pixel_id=_read(environ, "META_PIXEL_ID") or DEFAULT_PIXEL_ID,
        access_token=_read(environ, "META_ACCESS_TOKEN"),
        test_event_code=_read(environ, "META_TEST_EVENT_CODE"),
        log_level=(_read(environ, "LOG_LEVEL") or "INFO").upper(),
    )
