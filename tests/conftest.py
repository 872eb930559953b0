"""Pytest configuration and fixtures."""

import os
import tempfile
from collections.abc import Generator
from pathlib import Path
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

# Set test environment before importing app modules
_TEST_DIR = Path(tempfile.mkdtemp(prefix="vidcraft-tests-"))
os.environ["DATABASE_URL"] = f"sqlite:///{_TEST_DIR / 'vidcraft.db'}"
os.environ["STORAGE_PATH"] = str(_TEST_DIR / "storage")
os.environ["REDIS_URL"] = "redis://localhost:6379/1"
os.environ["CELERY_BROKER_URL"] = "redis://localhost:6379/1"
os.environ["CELERY_RESULT_BACKEND"] = "redis://localhost:6379/1"
os.environ["JOB_SCHEDULER"] = "memory"
os.environ["LLM_PROVIDER"] = "stub"
os.environ["IMAGE_GEN_PROVIDER"] = "stub"
os.environ["TRANSCRIPTION_PROVIDER"] = "stub"
os.environ["METADATA_PROVIDER"] = "stub"
os.environ["SCRAPE_PROVIDER"] = "stub"
os.environ["PUBLIC_BASE_URL"] = "http://testserver"
os.environ["LOG_LEVEL"] = "WARNING"


@pytest.fixture(scope="session", autouse=True)
def database() -> None:
    """Create the schema once for the whole run."""
    from vidcraft.db.session import init_db

    init_db(create_tables=True)


@pytest.fixture(scope="session")
def test_client() -> Generator[TestClient, None, None]:
    """Create a test client for the FastAPI app."""
    from vidcraft.main import app

    with TestClient(app) as client:
        yield client


@pytest.fixture
def user_id() -> str:
    """A fresh user so tests never see each other's rows."""
    return f"user_{uuid4().hex[:12]}"


@pytest.fixture
def auth_headers(user_id: str) -> dict[str, str]:
    return {"X-User-Id": user_id}


@pytest.fixture
def scheduler():
    """The process-wide in-memory job scheduler, emptied before each test."""
    from vidcraft.services.scheduler import get_job_scheduler

    job_scheduler = get_job_scheduler()
    job_scheduler.pending.clear()
    return job_scheduler


@pytest.fixture
def llm_provider():
    """Get a stub LLM provider."""
    from vidcraft.adapters.llm.stub import StubLLMProvider

    return StubLLMProvider()


@pytest.fixture
def image_gen_provider():
    """Get a stub image generation provider."""
    from vidcraft.adapters.image_gen.stub import StubImageGenProvider

    return StubImageGenProvider()


@pytest.fixture
def storage(tmp_path: Path):
    """Storage rooted in a per-test directory."""
    from vidcraft.services.storage import StorageService

    return StorageService(base_path=tmp_path / "storage", public_base_url="http://testserver")


@pytest.fixture
def project(test_client: TestClient, auth_headers: dict[str, str]) -> dict:
    response = test_client.post(
        "/api/v1/projects", json={"title": "Launch Week"}, headers=auth_headers
    )
    assert response.status_code == 201
    return response.json()


@pytest.fixture
def video(test_client: TestClient, auth_headers: dict[str, str], project: dict) -> dict:
    response = test_client.post(
        f"/api/v1/projects/{project['id']}/videos",
        json={
            "title": "How I Built a SaaS in 30 Days",
            "video_url": "https://cdn.example.com/videos/saas.mp4",
            "mime_type": "video/mp4",
        },
        headers=auth_headers,
    )
    assert response.status_code == 201
    return response.json()
