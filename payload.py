import time
from typing import Any, Dict, Mapping, Optional

from hashing import format_phone, hash_data
from schemas import EventData, InboundEvent, UserData

ACTION_SOURCE = "website"
DEFAULT_CURRENCY = "IDR"
DEFAULT_VALUE = 0
DEFAULT_CONTENT_TYPE = "product"

# input field -> Meta user_data key
HASHED_FIELDS = (
    ("email", "em"),
    ("first_name", "fn"),
    ("last_name", "ln"),
    ("city", "ct"),
    ("state", "st"),
    ("zip", "zp"),
    ("country", "country"),
    ("external_id", "external_id"),
)
PASSTHROUGH_FIELDS = ("fbc", "fbp")
OPTIONAL_COMMERCE_FIELDS = ("content_name", "content_ids", "contents", "order_id")


def client_ip_address(headers: Mapping[str, str], peer: Optional[str]) -> Optional[str]:
    forwarded_for = headers.get("x-forwarded-for")
    if forwarded_for:
        first = forwarded_for.split(",")[0].strip()
        if first:
            return first
    return peer


def build_user_data(
    user_data: Optional[UserData],
    client_ip: Optional[str],
    user_agent: Optional[str],
) -> Dict[str, Any]:
    """Meta user_data block: request context plus hashed identity fields."""
    result: Dict[str, Any] = {}
    if client_ip:
        result["client_ip_address"] = client_ip
    if user_agent:
        result["client_user_agent"] = user_agent
    if user_data is None:
        return result

    if user_data.phone:
        result["ph"] = hash_data(format_phone(user_data.phone))
    for field, key in HASHED_FIELDS:
        value = getattr(user_data, field)
        if value:
            result[key] = hash_data(value)
    for field in PASSTHROUGH_FIELDS:
        value = getattr(user_data, field)
        if value:
            result[field] = value
    return result


def build_custom_data(event_data: EventData) -> Dict[str, Any]:
    custom_data: Dict[str, Any] = {
        "currency": event_data.currency or DEFAULT_CURRENCY,
        "value": event_data.value or DEFAULT_VALUE,
        "content_type": event_data.content_type or DEFAULT_CONTENT_TYPE,
    }
    for field in OPTIONAL_COMMERCE_FIELDS:
        value = getattr(event_data, field)
        if value is not None:
            custom_data[field] = value
    return custom_data


def build_event(
    event: InboundEvent,
    headers: Mapping[str, str],
    peer: Optional[str] = None,
    now: Optional[float] = None,
) -> Dict[str, Any]:
    """Assemble one entry of the Conversions API ``data`` list.

    ``headers`` must support lowercase lookups (Starlette ``Headers`` do).
    """
    event_time = int(time.time() if now is None else now)
    result: Dict[str, Any] = {
        "event_name": event.event_name,
        "event_time": event_time,
        "action_source": ACTION_SOURCE,
    }

    source_url = event.event_source_url or headers.get("referer")
    if source_url:
        result["event_source_url"] = source_url

    result["user_data"] = build_user_data(
        event.user_data,
        client_ip_address(headers, peer),
        headers.get("user-agent"),
    )

    if event.event_id:
        result["event_id"] = event.event_id
    if event.event_data is not None:
        result["custom_data"] = build_custom_data(event.event_data)
    return result
