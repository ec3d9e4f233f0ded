import os
import tempfile
from collections.abc import AsyncIterator, Iterator
from pathlib import Path

# Keep the module-level settings away from real credentials and the working tree.
os.environ["API_KEY"] = "test-key"
os.environ["BLOB_BACKEND"] = "local"
os.environ["UPLOADS_PATH"] = str(Path(tempfile.gettempdir()) / "imagegen-test-uploads")

import pytest
from httpx import ASGITransport, AsyncClient

from imagegen.config import Settings, get_settings
from imagegen.main import app


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    return Settings(
        _env_file=None,
        api_key="test-key",
        image_api_url="https://images.example/generate",
        blob_backend="local",
        uploads_path=str(tmp_path),
        public_base_url="http://test",
    )


@pytest.fixture
def override_settings(test_settings: Settings) -> Iterator[Settings]:
    app.dependency_overrides[get_settings] = lambda: test_settings
    yield test_settings
    app.dependency_overrides.pop(get_settings, None)


@pytest.fixture
async def client(override_settings: Settings) -> AsyncIterator[AsyncClient]:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
