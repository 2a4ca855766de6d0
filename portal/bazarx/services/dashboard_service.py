"""
Dashboard aggregator client
"""
import logging

from pydantic import ValidationError

from bazarx.schemas.dashboard import DashboardPayload
from bazarx.services.backend_client import BackendClient, BackendError

logger = logging.getLogger(__name__)

INVALID_PAYLOAD_MESSAGE = "Invalid dashboard data received"


class DashboardService:

    async def fetch(self, client: BackendClient) -> DashboardPayload:
        """Fetch the role-shaped payload with a single GET; the upstream decides the shape."""
        data = await client.get("/dashboard")
        if not isinstance(data, dict):
            raise BackendError(INVALID_PAYLOAD_MESSAGE)
        try:
            return DashboardPayload.model_validate(data)
        except ValidationError as exc:
            logger.warning("Dashboard payload rejected: %s", exc)
            raise BackendError(INVALID_PAYLOAD_MESSAGE)


# Singleton
dashboard_service = DashboardService()
