import httpx
import pytest
import pytest_asyncio

from symvora.core.config import Settings
from symvora.main import create_app
from symvora.services.analyzer import PlaceholderAnalyzer


@pytest.fixture
def settings():
    return Settings(_env_file=None, AI_PROVIDER_API_KEY=None, LOG_DIR=None)


@pytest.fixture
def app(settings):
    return create_app(settings=settings, analyzer=PlaceholderAnalyzer())


@pytest_asyncio.fixture
async def client(app):
    async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
