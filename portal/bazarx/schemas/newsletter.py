"""
Newsletter Schemas
"""
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class Subscriber(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: str = Field(..., alias="_id")
    email: str
    isSubscribed: bool = True
    subscribedAt: Optional[str] = None
    source: str = "other"
    sourceLabel: Optional[str] = None
    createdAt: Optional[str] = None
    updatedAt: Optional[str] = None


class NewsletterStats(BaseModel):
    model_config = ConfigDict(extra="allow")

    total: int = 0
    active: int = 0
    inactive: int = 0
    sources: Dict[str, int] = Field(default_factory=dict)


class SubscriberPage(BaseModel):
    subscribers: List[Subscriber]
    total: int
    page: int
    page_size: int
    total_pages: int


class SubscribeRequest(BaseModel):
    email: str
    source: str = Field("footer", pattern="^(footer|popup|checkout|other)$")


class UnsubscribeRequest(BaseModel):
    email: str = ""


class UnsubscribeResult(BaseModel):
    """State of the unsubscribe page after a (possible) submission"""
    status: str  # idle | success | error
    message: str = ""
    email: str = ""


class MailtoResponse(BaseModel):
    url: str
    recipients: int
