"""
Pytest configuration and fixtures for Route Exposer tests
"""

import os
import sys
from dataclasses import dataclass, field

import httpx
import pytest
from fastapi.testclient import TestClient

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))  # noqa: PTH100, PTH118, PTH119, PTH120

from exposer.auth import create_access_token  # noqa: E402
from exposer.config import Settings  # noqa: E402
from exposer.container import build_services  # noqa: E402
from exposer.database import create_tables  # noqa: E402
from exposer.plugins.loader import initialize_plugins  # noqa: E402

UPSTREAM_BASE_URL = "http://upstream.test/wp-json"


@dataclass
class FakeUpstream:
    """Records requests and answers with a configurable response."""

    status_code: int = 200
    content: bytes = b'{"ok": true}'
    content_type: str = "application/json"
    error: Exception | None = None
    requests: list[httpx.Request] = field(default_factory=list)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return httpx.Response(
            self.status_code,
            content=self.content,
            headers={"content-type": self.content_type},
        )

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))


@pytest.fixture
def upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture
def test_settings(tmp_path) -> Settings:
    """Settings pointing every file the service writes into tmp_path."""
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'exposer_test.db'}",
        secret_key="test-secret-key",
        upstream_base_url=UPSTREAM_BASE_URL,
        plugins_dir=str(tmp_path / "plugins"),
        plugins_config_file=str(tmp_path / "plugins_config.json"),
    )


@pytest.fixture
async def services(test_settings, upstream):
    """Fully wired service graph with tables created and plugins loaded."""
    container = build_services(test_settings, http_client=upstream.client())
    await create_tables(container.engine)
    await initialize_plugins(container.registry, container.plugins, test_settings.plugins_config_file)

    yield container

    await container.http_client.aclose()
    await container.engine.dispose()


@pytest.fixture
def app(test_settings, upstream):
    from main import create_app

    return create_app(test_settings, http_client=upstream.client())


@pytest.fixture
def client(app):
    """Test client with the application lifespan running."""
    with TestClient(app) as test_client:
        yield test_client


def make_auth_headers(settings: Settings, role: str, subject: str | None = None) -> dict[str, str]:
    token = create_access_token({"sub": subject or f"test-{role}", "role": role}, settings)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_headers(test_settings) -> dict[str, str]:
    return make_auth_headers(test_settings, "administrator")


@pytest.fixture
def editor_headers(test_settings) -> dict[str, str]:
    return make_auth_headers(test_settings, "editor")


@pytest.fixture
def subscriber_headers(test_settings) -> dict[str, str]:
    return make_auth_headers(test_settings, "subscriber")


@pytest.fixture
def ns(test_settings) -> str:
    """URL prefix of the exposer namespace."""
    return test_settings.route_prefix
