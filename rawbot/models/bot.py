"""Bot document models"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


HOT_LEAD = "HOT_LEAD"


class PendingAction(BaseModel):
    """Unacknowledged event raised for the store owner (e.g. a hot lead)"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    id: str
    type: str
    user_message: str = ""

    @property
    def is_hot_lead(self) -> bool:
        return self.type == HOT_LEAD


class BotRecord(BaseModel):
    """
    Snapshot of a persisted bot document.

    Documents are stored with camelCase keys; attributes are snake_case.
    Snapshots are immutable; use model_copy(update=...) for local edits.
    Keys this model does not declare are kept as extras so a round trip
    never drops them.
    """
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="allow",
    )

    id: str
    store_name: str = ""
    bot_name: str = ""
    license_key: Optional[str] = None
    is_activated: bool = False
    activation_date: Optional[str] = None
    subscription_end_date: Optional[str] = None
    is_active: bool = False
    is_listening: bool = False
    knowledge_base: str = ""
    tone_value: int = Field(default=50, ge=0, le=100)
    learned_observations: List[str] = Field(default_factory=list)
    pending_action: Optional[PendingAction] = None

    # Instagram link (written together by the OAuth callback)
    instagram_connected: bool = False
    instagram_access_token: Optional[str] = None
    instagram_business_id: Optional[str] = None
    instagram_page_id: Optional[str] = None
    instagram_username: Optional[str] = None
    connected_at: Optional[str] = None

    @field_validator("tone_value", mode="before")
    @classmethod
    def _default_tone(cls, value):
        return 50 if value is None else value

    def to_document(self) -> dict:
        return self.model_dump(by_alias=True, mode="json")
