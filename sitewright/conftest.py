# sitewright/conftest.py
import asyncio
import json
import os
from typing import Any, Dict, List, Optional, Union

import pytest

os.environ.setdefault("ENV", "test")
os.environ.setdefault("SKIP_ENV_VALIDATION", "1")

from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import update  # noqa: E402

from sitewright.core import clerk_auth  # noqa: E402
from sitewright.core.config import settings  # noqa: E402
from sitewright.core.database import (  # noqa: E402
    create_all_tables,
    drop_all_tables,
    get_db_session,
    get_engine,
    init_engine,
    users,
)
from sitewright.features.generation.provider import set_completion_provider  # noqa: E402
from sitewright.features.templates.service import create_template  # noqa: E402
from sitewright.features.users.service import get_user, update_user_plan, upsert_user  # noqa: E402
from sitewright.main import app  # noqa: E402

TEST_CLERK_SECRET = "test-secret-key"

GENERATED_SITE = {
    "title": "Taco Bar",
    "pages": [
        {
            "name": "Homepage",
            "slug": "home",
            "content": {"hero": {"title": "Tacos all day", "subtitle": "Family recipes", "cta": "Order now"}},
        },
        {"name": "Menu", "slug": "menu", "content": {"sections": []}},
        {"name": "Contact", "slug": "contact", "content": {}},
    ],
    "styling": {"primaryColor": "#E4572E", "secondaryColor": "#29335C", "fontFamily": "Poppins"},
}

SAMPLE_CONTENT = {
    "pages": [
        {"name": "Homepage", "slug": "home", "content": {"hero": {"title": "Welcome"}}},
        {"name": "About", "slug": "about", "content": {"text": "Since 1999"}},
    ],
    "styling": {"primaryColor": "#3B82F6", "secondaryColor": "#6366F1", "fontFamily": "Inter"},
}


class FakeCompletionProvider:
    """
    Deterministic CompletionProvider for tests (no network).

    Responses are consumed in order; the last one repeats. A response that is
    an exception instance is raised instead of returned.
    """

    def __init__(self, responses: Optional[List[Union[str, Dict[str, Any], Exception]]] = None, delay: float = 0.0):
        self.responses = list(responses or [GENERATED_SITE])
        self.delay = delay
        self.calls: List[List[Dict[str, str]]] = []

    def respond_with(self, *responses: Union[str, Dict[str, Any], Exception]) -> None:
        self.responses = list(responses)

    async def complete_json(self, messages):
        self.calls.append(messages)
        await asyncio.sleep(self.delay)
        response = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(response, Exception):
            raise response
        return response if isinstance(response, str) else json.dumps(response)


@pytest.fixture(autouse=True)
def database(tmp_path):
    """Fresh SQLite file database per test."""
    init_engine(f"sqlite:///{tmp_path / 'sitewright-test.db'}")
    create_all_tables()
    yield
    drop_all_tables()
    get_engine().dispose()


@pytest.fixture(autouse=True)
def auth_settings(monkeypatch):
    """X-User-Id auth on, JWT verified with a known HS256 secret, no admin key."""
    monkeypatch.setattr(settings, "AUTH_HEADER_FALLBACK", True)
    monkeypatch.setattr(settings, "CLERK_SECRET_KEY", TEST_CLERK_SECRET)
    monkeypatch.setattr(settings, "CLERK_ISSUER", None)
    monkeypatch.setattr(settings, "CLERK_JWKS_URL", None)
    monkeypatch.setattr(settings, "CLERK_AUDIENCE", None)
    monkeypatch.setattr(settings, "ADMIN_KEY", None)
    monkeypatch.setattr(settings, "FREE_PLAN_AI_GENERATIONS", 3)
    yield
    clerk_auth.set_jwks_provider_for_tests(None)


@pytest.fixture(autouse=True)
def fake_provider():
    provider = FakeCompletionProvider()
    set_completion_provider(provider)
    yield provider
    set_completion_provider(None)


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def make_user():
    def _make_user(user_id: str = "user_1", *, plan: str = "free", ai_generations_used: int = 0, email: Optional[str] = None):
        upsert_user(user_id, email=email or f"{user_id}@example.com")
        if plan != "free":
            update_user_plan(user_id, plan)
        if ai_generations_used:
            with get_db_session() as session:
                session.execute(
                    update(users).where(users.c.id == user_id).values(ai_generations_used=ai_generations_used)
                )
        return get_user(user_id)

    return _make_user


@pytest.fixture
def make_template():
    def _make_template(name: str = "Bistro", category: str = "restaurant", *, content: Optional[Dict[str, Any]] = None, is_active: bool = True):
        return create_template(
            name=name,
            category=category,
            content=content or SAMPLE_CONTENT,
            description=f"{name} starter",
            is_active=is_active,
        )

    return _make_template


def auth_headers(user_id: str) -> Dict[str, str]:
    return {"X-User-Id": user_id}


@pytest.fixture
def create_site(client):
    """Create a website through the API and return its JSON body."""
    def _create_site(user_id: str = "user_1", subdomain: str = "joes-pizza", **fields):
        payload = {"name": fields.pop("name", "Joe's Pizza"), "subdomain": subdomain, **fields}
        resp = client.post("/api/websites", json=payload, headers=auth_headers(user_id))
        assert resp.status_code == 201, resp.text
        return resp.json()

    return _create_site
