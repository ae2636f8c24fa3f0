# tests/conftest.py
"""
Shared pytest fixtures for the UIGen backend tests.

Provides:
- Isolated settings (temporary SQLite file and workspace, mock-only providers)
- A started app and its service container
- An httpx AsyncClient bound to the app
- A populated virtual file system
"""
import os
import tempfile
from pathlib import Path

# Keep the module-level app in uigen.main away from the real data directory
_SESSION_DIR = tempfile.mkdtemp(prefix="uigen_test_")
os.environ.setdefault("APP_ENV", "test")
os.environ["DATABASE_PATH"] = str(Path(_SESSION_DIR) / "import.db")
os.environ["WORKSPACES_DIR"] = str(Path(_SESSION_DIR) / "workspaces")

import pytest
from httpx import ASGITransport, AsyncClient

from uigen.core.config import DatabaseSettings, LLMSettings, PathSettings, ServerSettings, Settings
from uigen.lib.file_system import VirtualFileSystem
from uigen.main import create_app


# ═══════════════════════════════════════════════════════
# FIXTURES - Settings & App
# ═══════════════════════════════════════════════════════

@pytest.fixture
def test_settings(tmp_path):
    """Settings isolated to a temporary directory with only the mock provider."""
    return Settings(
        server=ServerSettings(
            environment="test",
            version="1.0.0",
            cors_origins=["http://localhost:5173"],
            max_body_size=1024 * 1024,
            rate_limit="10000/minute",
        ),
        llm=LLMSettings(
            default_provider=None,
            anthropic_api_key=None,
            openai_api_key=None,
            google_api_key=None,
            enable_mock=True,
            mock_latency=0.0,
            health_check_on_startup=False,
        ),
        database=DatabaseSettings(path=tmp_path / "test.db"),
        paths=PathSettings(workspaces_dir=tmp_path / "workspaces"),
        debug=False,
    )


@pytest.fixture
async def app(test_settings):
    """A started application (providers registered)."""
    application = create_app(test_settings)
    await application.state.services.startup()
    yield application
    await application.state.services.shutdown()


@pytest.fixture
def services(app):
    return app.state.services


@pytest.fixture
async def async_client(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
async def project(async_client):
    """A project created through the API."""
    response = await async_client.post(
        "/api/v1/projects",
        json={"name": "Test Project", "description": "A project for tests"},
    )
    assert response.status_code == 201
    return response.json()


# ═══════════════════════════════════════════════════════
# FIXTURES - Virtual File System
# ═══════════════════════════════════════════════════════

@pytest.fixture
def vfs():
    return VirtualFileSystem()


@pytest.fixture
def populated_vfs(vfs):
    """A small Vue project layout."""
    vfs.create_file("/src/App.vue", "<template>\n  <div>Hello World</div>\n</template>\n")
    vfs.create_file("/src/main.ts", "import { createApp } from 'vue'\nimport App from './App.vue'\n")
    vfs.create_file("/src/components/Button.vue", "<template><button>Click</button></template>")
    vfs.create_file("/README.md", "# Test project")
    return vfs
