"""Shared fixtures: a throwaway SQLite database per test and an API client."""

from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from tev.api.main import create_app
from tev.db.repo import Repo
from tev.jobs.import_posts import import_posts
from tev.metadata import metadata_for_blog_or_default
from tev.settings import Settings

FIXTURES_DIR = Path(__file__).parent / "fixtures"
POSTS_XML = FIXTURES_DIR / "posts.xml"
MESSAGES_XML = FIXTURES_DIR / "messages.xml"

BLOG = "myblog"


@pytest.fixture(autouse=True)
def _no_api_key(monkeypatch):
    """Tests run without the API key guard unless they set API_KEY themselves."""
    monkeypatch.delenv("API_KEY", raising=False)


@pytest.fixture
def settings(tmp_path):
    return Settings(
        db_url=f"sqlite:///{tmp_path / 'tev.db'}",
        data_dir=tmp_path / "data",
        default_locale="en",
        photo_fetch_attempts=1,
        photo_fetch_timeout=5,
        photo_fetch_concurrency=2,
        cors_origins="",
    )


@pytest.fixture
def repo(settings):
    r = Repo(settings=settings)
    r.ensure_schema()
    yield r
    r.close()


@pytest.fixture
def blog_md(repo):
    """Metadata row of the test blog (the default blog)."""
    return metadata_for_blog_or_default(repo, BLOG)


@pytest.fixture
def imported(repo, blog_md):
    """The posts fixture imported into the test blog."""
    return import_posts(repo, BLOG, POSTS_XML)


@pytest.fixture
def client(settings):
    app = create_app(settings)
    with TestClient(app) as c:
        yield c


def upload(client, path, fixture, blog=BLOG):
    with open(fixture, "rb") as f:
        return client.post(f"{path}/{blog}", files={"file": (fixture.name, f, "application/xml")})


@pytest.fixture
def client_with_posts(client):
    resp = upload(client, "/postDataUpload", POSTS_XML)
    assert resp.status_code == 200, resp.text
    return client
