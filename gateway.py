import logging
from typing import Any, Dict

import requests
from pydantic import BaseModel, ConfigDict

from config import Settings


class GatewayOutcome(BaseModel):
    model_config = ConfigDict(frozen=True)

    status_code: int
    body: Any

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


class Gateway:
    """Delivers one assembled event to the ads provider."""

    def send(self, event: Dict[str, Any]) -> GatewayOutcome:
        raise NotImplementedError


class MetaGateway(Gateway):
    """Single-shot POST to the Conversions API. No retry and no timeout override."""

    def __init__(self, settings: Settings):
        self.settings = settings

    def envelope(self, event: Dict[str, Any]) -> Dict[str, Any]:
        body: Dict[str, Any] = {"data": [event]}
        if self.settings.test_event_code:
            body["test_event_code"] = self.settings.test_event_code
        return body

    def send(self, event: Dict[str, Any]) -> GatewayOutcome:
        response = requests.post(
            self.settings.events_url,
            params={"access_token": self.settings.access_token},
            json=self.envelope(event),
        )
        try:
            body = response.json()
        except ValueError:
            logging.warning("Meta CAPI returned a non-JSON body (status %s)", response.status_code)
            body = response.text
        return GatewayOutcome(status_code=response.status_code, body=body)
