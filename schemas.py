from typing import Any, Optional

from pydantic import BaseModel, ConfigDict


class UserData(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    phone: Optional[str] = None
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip: Optional[str] = None
    country: Optional[str] = None
    external_id: Optional[str] = None
    # Browser cookies, sent to Meta unhashed
    fbc: Optional[str] = None
    fbp: Optional[str] = None


class EventData(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    currency: Optional[str] = None
    value: Any = None
    content_name: Optional[str] = None
    content_ids: Any = None
    content_type: Optional[str] = None
    contents: Any = None
    order_id: Optional[str] = None


class InboundEvent(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    event_name: Optional[str] = None
    event_id: Optional[str] = None
    event_source_url: Optional[str] = None
    user_data: Optional[UserData] = None
    event_data: Optional[EventData] = None
