"""
Newsletter Service

Public subscribe/unsubscribe plus the admin subscriber list. The upstream
returns the whole list; filtering and paging happen here.
"""
import csv
import io
import logging
import math
import re
from typing import List, Optional
from urllib.parse import quote

from bazarx.config import settings
from bazarx.schemas.newsletter import (
    MailtoResponse,
    NewsletterStats,
    SubscribeRequest,
    Subscriber,
    SubscriberPage,
    UnsubscribeResult,
)
from bazarx.services.backend_client import BackendClient, BackendError
from bazarx.services.validation import FormValidationError
from bazarx.utils import formatting

logger = logging.getLogger(__name__)

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

UNSUBSCRIBED_MESSAGE = "You have been successfully unsubscribed from our newsletter."
UNSUBSCRIBE_FAILED_MESSAGE = "Failed to unsubscribe. Please try again."

SOURCE_LABELS = {
    "footer": "Website Footer",
    "popup": "Popup Form",
    "checkout": "Checkout Page",
    "other": "Other Source",
}

CSV_HEADER = ["Email", "Status", "Source", "Subscribed Date"]
MAIL_SUBJECT = "Newsletter from BazarXpress"
MAIL_BODY = """Hello,

We hope this email finds you well.

Best regards,
BazarXpress Team

---

To unsubscribe from our newsletter, please click this link:
{unsubscribe_url}
"""


def source_label(source: Optional[str]) -> str:
    return SOURCE_LABELS.get(source or "", "Unknown")


def check_email(email: Optional[str]) -> str:
    """
    Trimmed email, or FormValidationError with the message shown under the field
    """
    value = (email or "").strip()
    if not value:
        raise FormValidationError({"email": "Please enter your email address"})
    if not EMAIL_RE.match(value):
        raise FormValidationError({"email": "Please enter a valid email address"})
    return value


def filter_subscribers(
    subscribers: List[Subscriber],
    status: str = "all",
    source: str = "all",
    search: Optional[str] = None,
) -> List[Subscriber]:
    result = list(subscribers)
    if status != "all":
        active = status == "active"
        result = [s for s in result if s.isSubscribed == active]
    if source != "all":
        result = [s for s in result if s.source == source]
    if search:
        term = search.lower()
        result = [s for s in result if term in s.email.lower()]
    return result


def paginate(subscribers: List[Subscriber], page: int, page_size: Optional[int] = None) -> SubscriberPage:
    size = page_size or settings.NEWSLETTER_PAGE_SIZE
    total_pages = max(1, math.ceil(len(subscribers) / size))
    page = min(max(1, page), total_pages)
    start = (page - 1) * size
    return SubscriberPage(
        subscribers=[
            sub.model_copy(update={"sourceLabel": source_label(sub.source)})
            for sub in subscribers[start:start + size]
        ],
        total=len(subscribers),
        page=page,
        page_size=size,
        total_pages=total_pages,
    )


def export_csv(subscribers: List[Subscriber]) -> str:
    output = io.StringIO()
    writer = csv.writer(output, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    for sub in subscribers:
        writer.writerow([
            sub.email,
            "Active" if sub.isSubscribed else "Inactive",
            sub.source,
            formatting.short_date(sub.subscribedAt),
        ])
    return output.getvalue()


def mailto_link(subscribers: List[Subscriber]) -> MailtoResponse:
    """
    mailto: URL addressing every active subscriber in BCC

    Raises:
        FormValidationError: no active subscribers
    """
    emails = [s.email for s in subscribers if s.isSubscribed]
    if not emails:
        raise FormValidationError({"subscribers": "No active subscribers found"})
    body = MAIL_BODY.format(unsubscribe_url=f"{settings.SITE_URL.rstrip('/')}/newsletter/unsubscribe")
    url = "mailto:?subject={}&body={}&bcc={}".format(
        quote(MAIL_SUBJECT),
        quote(body),
        quote(",".join(emails)),
    )
    return MailtoResponse(url=url, recipients=len(emails))


class NewsletterService:

    async def unsubscribe(self, client: BackendClient, email: Optional[str]) -> UnsubscribeResult:
        """
        Validate and submit an unsubscribe request

        Validation failures and upstream errors both come back as an
        ``error`` result carrying the message to show; nothing is raised.
        """
        try:
            address = check_email(email)
        except FormValidationError as exc:
            return UnsubscribeResult(status="error", message=exc.first_message, email=email or "")

        try:
            data = await client.post("/newsletter/unsubscribe", {"email": address})
        except BackendError as exc:
            return UnsubscribeResult(
                status="error",
                message=exc.message or UNSUBSCRIBE_FAILED_MESSAGE,
                email=address,
            )
        message = data.get("message") if isinstance(data, dict) else None
        logger.info("Newsletter unsubscribe accepted")
        return UnsubscribeResult(status="success", message=message or UNSUBSCRIBED_MESSAGE, email=address)

    async def subscribe(self, client: BackendClient, request: SubscribeRequest) -> str:
        address = check_email(request.email)
        data = await client.post("/newsletter/subscribe", {"email": address, "source": request.source})
        message = data.get("message") if isinstance(data, dict) else None
        return message or "Successfully subscribed to newsletter"

    async def list_subscribers(self, client: BackendClient) -> List[Subscriber]:
        data = await client.get("/newsletter")
        if isinstance(data, dict):
            data = data.get("subscribers", [])
        if not isinstance(data, list):
            raise BackendError("Could not load subscribers")
        return [Subscriber.model_validate(s) for s in data if isinstance(s, dict) and s.get("_id")]

    async def stats(self, client: BackendClient) -> NewsletterStats:
        data = await client.get("/newsletter/stats")
        return NewsletterStats.model_validate(data if isinstance(data, dict) else {})

    async def delete(self, client: BackendClient, subscriber_id: str):
        """Delete one subscriber, then reload both the list and the stats."""
        await client.delete(f"/newsletter/{subscriber_id}")
        logger.info("Subscriber %s deleted", subscriber_id)
        return await self.list_subscribers(client), await self.stats(client)


# Singleton
newsletter_service = NewsletterService()
