"""Shared pytest fixtures for Picser tests."""

from __future__ import annotations

import sys
from pathlib import Path

# Add backend to sys.path for imports
backend_path = Path(__file__).parent.parent / "backend"
if str(backend_path.resolve()) not in sys.path:
    sys.path.insert(0, str(backend_path.resolve()))

import pytest
from fastapi.testclient import TestClient

from picser.api_views import get_content_writer
from picser.config import GithubConfig
from picser.github_storage import WriteResult
from picser.main import create_app

COMMIT_SHA = "0123456789abcdef0123456789abcdef01234567"


class FakeWriter:
    """Records every content write instead of calling GitHub."""

    def __init__(self, result: WriteResult | None = None, error: Exception | None = None) -> None:
        self.calls: list[dict] = []
        self.result = result or WriteResult(
            commit_sha=COMMIT_SHA,
            html_url="https://github.com/acme/imgs/blob/main/pics/image.png",
        )
        self.error = error

    def __call__(self, **kwargs) -> WriteResult:
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        return self.result


@pytest.fixture
def fake_writer() -> FakeWriter:
    return FakeWriter()


@pytest.fixture
def github_config() -> GithubConfig:
    return GithubConfig(token="server-token", owner="acme", repo="imgs", branch="main", folder="uploads")


@pytest.fixture
def client(fake_writer: FakeWriter, github_config: GithubConfig) -> TestClient:
    app = create_app(github_config)
    app.dependency_overrides[get_content_writer] = lambda: fake_writer
    return TestClient(app)
