import os
from typing import Any, Callable, Dict, List, Tuple, Union

import httpx
import pytest
from cryptography.fernet import Fernet

# Settings are read once at import time, so the environment comes first
os.environ["API_URL"] = "http://upstream.test/api"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["ENCRYPTION_KEY"] = Fernet.generate_key().decode()
os.environ["GOOGLE_MAPS_API_KEY"] = "test-google-key"
os.environ["OPENCAGE_API_KEY"] = "test-opencage-key"
os.environ["PUBLIC_RATE_LIMIT"] = "1000/minute"
os.environ["RATE_LIMIT_PER_MINUTE"] = "1000"
os.environ["DEBUG"] = "true"

from fastapi.testclient import TestClient  # noqa: E402

from bazarx.dependencies import get_backend_client  # noqa: E402
from bazarx.main import app  # noqa: E402
from bazarx.models.user import SessionUser  # noqa: E402
from bazarx.services.backend_client import BackendClient  # noqa: E402
from bazarx.services.geocoding_service import GeocodingService, get_geocoding_service  # noqa: E402
from bazarx.state import session_stores  # noqa: E402
from bazarx.utils.security import create_session_token  # noqa: E402

UPSTREAM_BASE = "http://upstream.test/api"

Reply = Union[Tuple[int, Any], Callable[[httpx.Request], httpx.Response]]


class FakeUpstream:
    """
    Canned upstream API

    ``add`` registers a reply per (method, path). A list of replies is
    consumed in order, the last one repeating. Unregistered calls get 404.
    """

    def __init__(self):
        self.routes: Dict[Tuple[str, str], List[Reply]] = {}
        self.calls: List[httpx.Request] = []

    def add(self, method: str, path: str, *replies: Reply) -> None:
        self.routes[(method.upper(), path)] = list(replies)

    def json(self, method: str, path: str, body: Any = None, status_code: int = 200) -> None:
        self.add(method, path, (status_code, body))

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        replies = self.routes.get((request.method, request.url.path))
        if not replies:
            return httpx.Response(404, json={"error": "Not found"})
        reply = replies.pop(0) if len(replies) > 1 else replies[0]
        if callable(reply):
            return reply(request)
        status_code, body = reply
        return httpx.Response(status_code, json=body)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def calls_to(self, method: str, path: str) -> List[httpx.Request]:
        return [c for c in self.calls if c.method == method and c.url.path == path]

    def client(self, token=None) -> BackendClient:
        return BackendClient(token=token, base_url=UPSTREAM_BASE, transport=self.transport)


@pytest.fixture
def upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture
def geo_upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture
def client(upstream, geo_upstream):
    app.dependency_overrides[get_backend_client] = lambda: upstream.client()
    app.dependency_overrides[get_geocoding_service] = lambda: GeocodingService(transport=geo_upstream.transport)
    with TestClient(app, follow_redirects=False) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def session_headers():
    """Build Authorization headers for a session of the given role."""
    created = []

    def make(role: str, user_id: str = "u1", name: str = "Asha") -> Dict[str, str]:
        user = SessionUser(
            id=user_id,
            name=name,
            email=f"{user_id}@bazarx.test",
            role=role,
            token=f"upstream-{user_id}",
        )
        token = create_session_token(user)
        created.append(user.sid)
        return {"Authorization": f"Bearer {token}"}

    yield make
    for sid in created:
        session_stores.drop(sid)
