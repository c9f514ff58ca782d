"""App data schemas - per-app settings stored on event types"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, HttpUrl, TypeAdapter, ValidationError, field_validator

_http_url = TypeAdapter(HttpUrl)


class SendgridAddRequest(BaseModel):
    api_key: Optional[str] = None


class InstalledAppResponse(BaseModel):
    url: str


class EventTypeAppData(BaseModel):
    """Settings every event type app card carries"""

    model_config = ConfigDict(extra="forbid")

    enabled: bool = False


class PlausibleAppData(EventTypeAppData):
    PLAUSIBLE_URL: str = "https://plausible.io/js/script.js"
    trackingId: str = ""

    @field_validator("PLAUSIBLE_URL")
    @classmethod
    def validate_plausible_url(cls, v: str) -> str:
        # Stored as entered; HttpUrl would normalise it (trailing slash)
        try:
            _http_url.validate_python(v)
        except ValidationError as e:
            raise ValueError(f"Invalid URL: {e.errors()[0]['msg']}") from e
        return v


# slug -> schema of the data the app keeps in event_type.metadata["apps"][slug]
APP_DATA_SCHEMAS: dict[str, type[EventTypeAppData]] = {
    "plausible": PlausibleAppData,
}


class EventTypeAppCardResponse(BaseModel):
    slug: str
    eventTypeId: int
    teamId: Optional[int] = None
    enabled: bool
    appData: dict
