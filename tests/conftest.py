import os

import httpx
import pytest
import pytest_asyncio

from pdok_apis.main import app
from pdok_apis.services.bag import BagClientBuilder
from pdok_apis.services.brk import BrkClientBuilder
from pdok_apis.services.locatieserver import LookupClientBuilder

USER_AGENT = "pdok-apis tests"
TEST_BAG_API_KEY = "TEST_BAG_API_KEY"

LOCATIESERVER_BASE = "http://locatieserver.test/search/v3_1"
BAG_BASE = "http://bag.test/lvbag/individuelebevragingen/v2"
BRK_BASE = "http://brk.test/kadastralekaart/wfs/v5_0"


@pytest_asyncio.fixture
async def lookup_client():
    client = LookupClientBuilder(USER_AGENT).base_url(LOCATIESERVER_BASE).build()
    yield client
    await client.aclose()


@pytest_asyncio.fixture
async def bag_client():
    client = BagClientBuilder(USER_AGENT, TEST_BAG_API_KEY).base_url(BAG_BASE).build()
    yield client
    await client.aclose()


@pytest_asyncio.fixture
async def brk_client():
    client = BrkClientBuilder(USER_AGENT).base_url(BRK_BASE).build()
    yield client
    await client.aclose()


@pytest.fixture
def bag_api_key():
    """Live BAG API key; live BAG tests are skipped without one."""
    key = os.environ.get("BAG_API_KEY")
    if not key:
        pytest.skip("Environment variable missing: BAG_API_KEY")
    return key


@pytest_asyncio.fixture
async def client(lookup_client, bag_client, brk_client):
    """HTTP client for the FastAPI app, with upstream clients pointed at test hosts."""
    app.state.lookup_client = lookup_client
    app.state.bag_client = bag_client
    app.state.brk_client = brk_client
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
