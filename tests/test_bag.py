import copy
import re

import httpx
import pytest
from pydantic import ValidationError

from mock_responses import PAND_RESPONSE, VERBLIJFSOBJECT_RESPONSE
from pdok_apis.errors import (
    ConfigurationError,
    InvalidQueryError,
    MalformedResponseError,
    NetworkError,
    NotFoundError,
    UnauthorizedError,
    UpstreamError,
    UpstreamTimeoutError,
)
from pdok_apis.models.crs import CoordinateSpace
from pdok_apis.services.bag import BagClient, BagClientBuilder, _validate_bag_id

VBO_URL = "http://bag.test/lvbag/individuelebevragingen/v2/verblijfsobjecten/0268010000084126"
PAND_URL = "http://bag.test/lvbag/individuelebevragingen/v2/panden/0268100000014867"


def test_validate_bag_id_valid():
    _validate_bag_id("0363010000696734")  # should not raise


def test_validate_bag_id_invalid():
    with pytest.raises(InvalidQueryError, match="must be 16 digits"):
        _validate_bag_id("short")
    with pytest.raises(InvalidQueryError, match="must be 16 digits"):
        _validate_bag_id("abcdefghijklmnop")
    with pytest.raises(ValueError):
        _validate_bag_id("")


def test_builder_without_api_key_fails(httpx_mock):
    with pytest.raises(ConfigurationError) as exc_info:
        BagClientBuilder("ua").build()

    assert exc_info.value.field == "api_key"
    assert exc_info.value.service == "bag"
    assert httpx_mock.get_requests() == []


def test_builder_with_empty_api_key_fails():
    with pytest.raises(ConfigurationError, match="api_key"):
        BagClientBuilder("ua", "").build()


def test_builder_defaults():
    client = BagClientBuilder("ua", "key").build()
    assert client.config.api_key == "key"
    assert client.config.accepted_crs == CoordinateSpace.rijksdriehoek
    assert client.config.connection_timeout == 5.0
    assert client.config.request_timeout == 20.0


def test_constructor_and_builder_are_equivalent():
    built = (
        BagClientBuilder("ua")
        .api_key("key")
        .accept_crs(CoordinateSpace.gps)
        .connection_timeout_secs(2)
        .request_timeout_secs(5)
        .build()
    )
    constructed = BagClient(
        "key", "ua", 5, connection_timeout_secs=2, accept_crs=CoordinateSpace.gps
    )
    assert built.config == constructed.config


def test_configuration_is_immutable():
    client = BagClientBuilder("ua", "key").build()
    with pytest.raises(ValidationError):
        client.config.api_key = "other"


@pytest.mark.asyncio
async def test_get_panden(bag_client, httpx_mock):
    httpx_mock.add_response(
        url=VBO_URL,
        json=VERBLIJFSOBJECT_RESPONSE,
        match_headers={"X-Api-Key": "TEST_BAG_API_KEY", "Accept-Crs": "epsg:28992"},
    )
    httpx_mock.add_response(
        url=PAND_URL,
        json=PAND_RESPONSE,
        match_headers={"X-Api-Key": "TEST_BAG_API_KEY", "Accept-Crs": "epsg:28992"},
    )

    panden = await bag_client.get_panden("0268010000084126")

    assert len(panden) == 1
    pand = panden[0]
    assert pand.identificatiecode == "0268100000014867"
    assert pand.bouwjaar == 2008
    assert pand.pandstatus == "Pand in gebruik"
    assert pand.objectstatus == "Verblijfsobject in gebruik"
    assert pand.vloeroppervlak == 1250
    assert pand.gebruiksdoel == "kantoorfunctie, bijeenkomstfunctie"
    assert pand.geometry["type"] == "Polygon"
    # 30m x 20m footprint
    assert pand.pandvlak == 600


@pytest.mark.asyncio
async def test_get_panden_multiple_buildings(bag_client, httpx_mock):
    vbo = copy.deepcopy(VERBLIJFSOBJECT_RESPONSE)
    vbo["_links"]["maaktDeelUitVan"].append(
        {"href": "https://api.bag.kadaster.nl/lvbag/individuelebevragingen/v2/panden/0268100000099999"}
    )
    second = copy.deepcopy(PAND_RESPONSE)
    second["pand"]["identificatie"] = "0268100000099999"

    httpx_mock.add_response(url=VBO_URL, json=vbo)
    httpx_mock.add_response(url=PAND_URL, json=PAND_RESPONSE)
    httpx_mock.add_response(
        url="http://bag.test/lvbag/individuelebevragingen/v2/panden/0268100000099999",
        json=second,
    )

    panden = await bag_client.get_panden("0268010000084126")

    assert [p.identificatiecode for p in panden] == ["0268100000014867", "0268100000099999"]


@pytest.mark.asyncio
async def test_get_panden_rejects_foreign_link(bag_client, httpx_mock):
    vbo = copy.deepcopy(VERBLIJFSOBJECT_RESPONSE)
    vbo["_links"]["maaktDeelUitVan"] = [{"href": "http://elsewhere.test/panden/0268100000014867"}]
    httpx_mock.add_response(url=VBO_URL, json=vbo)

    with pytest.raises(MalformedResponseError, match="outside the BAG API"):
        await bag_client.get_panden("0268010000084126")

    assert [r.url.host for r in httpx_mock.get_requests()] == ["bag.test"]


@pytest.mark.asyncio
async def test_get_panden_follows_link_on_configured_base(bag_client, httpx_mock):
    vbo = copy.deepcopy(VERBLIJFSOBJECT_RESPONSE)
    vbo["_links"]["maaktDeelUitVan"] = [{"href": PAND_URL}]
    httpx_mock.add_response(url=VBO_URL, json=vbo)
    httpx_mock.add_response(url=PAND_URL, json=PAND_RESPONSE)

    panden = await bag_client.get_panden("0268010000084126")

    assert [p.identificatiecode for p in panden] == ["0268100000014867"]


def test_builder_rejects_unknown_crs():
    with pytest.raises(ConfigurationError) as exc_info:
        BagClientBuilder("ua", "key").accept_crs("rd").build()

    assert exc_info.value.field == "accepted_crs"
    assert exc_info.value.service == "bag"


@pytest.mark.asyncio
async def test_get_panden_invalid_id(bag_client):
    with pytest.raises(InvalidQueryError, match="Invalid BAG object ID"):
        await bag_client.get_panden("nonexistent")


@pytest.mark.asyncio
@pytest.mark.parametrize("status_code", [401, 403])
async def test_get_panden_unauthorized(bag_client, httpx_mock, status_code):
    httpx_mock.add_response(url=VBO_URL, status_code=status_code)

    with pytest.raises(UnauthorizedError):
        await bag_client.get_panden("0268010000084126")


@pytest.mark.asyncio
async def test_get_panden_not_found(bag_client, httpx_mock):
    httpx_mock.add_response(
        url=VBO_URL,
        status_code=404,
        json={"title": "Opgevraagde resource bestaat niet.", "status": 404},
    )

    with pytest.raises(NotFoundError):
        await bag_client.get_panden("0268010000084126")


@pytest.mark.asyncio
async def test_get_panden_upstream_error(bag_client, httpx_mock):
    httpx_mock.add_response(url=VBO_URL, status_code=500)

    with pytest.raises(UpstreamError) as exc_info:
        await bag_client.get_panden("0268010000084126")
    assert exc_info.value.status_code == 500


@pytest.mark.asyncio
async def test_get_panden_malformed(bag_client, httpx_mock):
    httpx_mock.add_response(url=VBO_URL, json={"verblijfsobject": {}})

    with pytest.raises(MalformedResponseError):
        await bag_client.get_panden("0268010000084126")


@pytest.mark.asyncio
async def test_get_panden_malformed_pand(bag_client, httpx_mock):
    httpx_mock.add_response(url=VBO_URL, json=VERBLIJFSOBJECT_RESPONSE)
    httpx_mock.add_response(url=PAND_URL, json={"pand": {"identificatie": "0268100000014867"}})

    with pytest.raises(MalformedResponseError):
        await bag_client.get_panden("0268010000084126")


@pytest.mark.asyncio
async def test_get_panden_timeout(bag_client, httpx_mock):
    httpx_mock.add_exception(httpx.ConnectTimeout("Connect timed out"), url=VBO_URL)

    with pytest.raises(UpstreamTimeoutError):
        await bag_client.get_panden("0268010000084126")


@pytest.mark.asyncio
async def test_get_panden_network_error(bag_client, httpx_mock):
    httpx_mock.add_exception(httpx.ConnectError("Name or service not known"), url=VBO_URL)

    with pytest.raises(NetworkError):
        await bag_client.get_panden("0268010000084126")


@pytest.mark.asyncio
async def test_get_panden_gps_area_in_square_meters(httpx_mock):
    client = BagClientBuilder("ua", "key").base_url("http://bag.test").accept_crs(
        CoordinateSpace.gps
    ).build()
    pand = copy.deepcopy(PAND_RESPONSE)
    # roughly 100m x 100m around Nijmegen
    pand["pand"]["geometrie"] = {
        "type": "Polygon",
        "coordinates": [
            [[5.8690, 51.8380], [5.8704, 51.8380], [5.8704, 51.8389], [5.8690, 51.8389], [5.8690, 51.8380]]
        ],
    }

    httpx_mock.add_response(
        url="http://bag.test/verblijfsobjecten/0268010000084126",
        json=VERBLIJFSOBJECT_RESPONSE,
        match_headers={"Accept-Crs": "epsg:4326"},
    )
    httpx_mock.add_response(url=re.compile(r"http://bag\.test/panden/.*"), json=pand)

    panden = await client.get_panden("0268010000084126")
    await client.aclose()

    assert 8000 < panden[0].pandvlak < 12000


@pytest.mark.asyncio
async def test_check_status(bag_client, httpx_mock):
    httpx_mock.add_response(url=VBO_URL, json=VERBLIJFSOBJECT_RESPONSE)
    httpx_mock.add_response(url=PAND_URL, json=PAND_RESPONSE)

    assert await bag_client.check_status() is True


@pytest.mark.asyncio
async def test_get_panden_without_buildings(bag_client, httpx_mock):
    vbo = copy.deepcopy(VERBLIJFSOBJECT_RESPONSE)
    del vbo["_links"]["maaktDeelUitVan"]
    httpx_mock.add_response(url=VBO_URL, json=vbo)

    assert await bag_client.get_panden("0268010000084126") == []
