from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class TrackingMeta(BaseModel):
    """Known keys of the tracking metadata blob; unknown keys are kept as-is."""

    model_config = ConfigDict(extra="allow")

    carrier: Optional[str] = None
    tracking_url: Optional[str] = None
    hub: Optional[str] = None
    handed_over_to: Optional[str] = None

    def as_json(self) -> Optional[dict]:
        data = self.model_dump(exclude_none=True)
        return data or None


class TrackingEntryRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    order_id: int
    status: str
    message: str
    location: Optional[str] = None
    meta: Optional[dict] = None
    created_by: Optional[int] = None
    created_at: datetime


class TrackingNoteCreate(BaseModel):
    message: str = Field(min_length=1)
    location: Optional[str] = None
    meta: Optional[TrackingMeta] = None
