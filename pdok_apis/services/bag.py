import logging
import re
from typing import Any

from pydantic import BaseModel, Field
from shapely.errors import ShapelyError

from pdok_apis.config import settings
from pdok_apis.errors import (
    InvalidQueryError,
    MalformedResponseError,
    NotFoundError,
    UnauthorizedError,
)
from pdok_apis.geometry import footprint_area
from pdok_apis.models.building import Pand
from pdok_apis.models.crs import CoordinateSpace
from pdok_apis.services.base import BaseClient, CrsClientBuilder, make_configuration

logger = logging.getLogger(__name__)

# Links in BAG responses always point at the public API
BAG_PUBLIC_BASE = "https://api.bag.kadaster.nl/lvbag/individuelebevragingen/v2"

# Verblijfsobject of Castellastraat 26, Nijmegen
STATUS_REFERENCE_ID = "0268010000084126"

_BAG_ID_PATTERN = re.compile(r"^[0-9]{16}$")


def _validate_bag_id(identifier: str, label: str = "ID") -> None:
    if not identifier or not _BAG_ID_PATTERN.match(identifier):
        raise InvalidQueryError(
            f"Invalid BAG {label}: must be 16 digits, got '{identifier}'", BagClient.service
        )


class _Link(BaseModel):
    href: str


class _Links(BaseModel):
    maakt_deel_uit_van: list[_Link] = Field(default_factory=list, alias="maaktDeelUitVan")


class _Verblijfsobject(BaseModel):
    status: str | None = None
    oppervlakte: int | None = None
    gebruiksdoelen: list[str] = Field(default_factory=list)


class _VerblijfsobjectResponse(BaseModel):
    verblijfsobject: _Verblijfsobject
    links: _Links = Field(alias="_links")


class _PandBody(BaseModel):
    identificatie: str
    geometrie: dict[str, Any]
    oorspronkelijk_bouwjaar: int | None = Field(default=None, alias="oorspronkelijkBouwjaar")
    status: str


class _PandResponse(BaseModel):
    pand: _PandBody


class BagClient(BaseClient):
    """Client for the BAG individuele bevragingen API of the Kadaster."""

    service = "bag"
    status_errors = {
        401: UnauthorizedError,
        403: UnauthorizedError,
        404: NotFoundError,
    }

    def __init__(
        self,
        api_key: str,
        user_agent: str,
        request_timeout_secs: float | None = None,
        *,
        connection_timeout_secs: float | None = None,
        accept_crs: CoordinateSpace | None = None,
        base_url: str | None = None,
    ):
        super().__init__(
            make_configuration(
                self.service,
                user_agent,
                base_url=base_url or settings.bag_api_base,
                api_key=api_key,
                requires_api_key=True,
                accepted_crs=accept_crs or settings.bag_accept_crs,
                connection_timeout=(
                    connection_timeout_secs
                    if connection_timeout_secs is not None
                    else settings.bag_connection_timeout
                ),
                request_timeout=(
                    request_timeout_secs
                    if request_timeout_secs is not None
                    else settings.bag_request_timeout
                ),
            )
        )

    def _default_headers(self) -> dict[str, str]:
        headers = super()._default_headers()
        headers["X-Api-Key"] = self.config.api_key
        return headers

    def _rebase_link(self, href: str) -> str:
        """Point a link from a BAG response at the configured base URL.

        Only links under the public BAG API or the configured base URL are
        followed, since every request carries the API key.
        """
        base_url = self.config.base_url.rstrip("/")
        if href.startswith(BAG_PUBLIC_BASE + "/"):
            return base_url + href[len(BAG_PUBLIC_BASE):]
        if href.startswith(base_url + "/"):
            return href
        logger.warning("bag returned a link outside the BAG API: %s", href)
        raise MalformedResponseError(
            f"bag returned a link outside the BAG API: {href}", self.service
        )

    async def _fetch_pand(self, href: str) -> _PandBody:
        resp = await self._get(self._rebase_link(href))
        return self._decode(resp, _PandResponse).pand

    def _pandvlak(self, pand: _PandBody) -> int | None:
        try:
            return footprint_area(pand.geometrie, self.config.accepted_crs)
        except (ShapelyError, ValueError, KeyError, TypeError) as exc:
            raise MalformedResponseError(
                f"bag returned an invalid geometry for pand {pand.identificatie}", self.service
            ) from exc

    async def get_panden(self, identifier: str) -> list[Pand]:
        """Fetch the panden (buildings) the given verblijfsobject is part of."""
        _validate_bag_id(identifier, "object ID")

        resp = await self._get(f"/verblijfsobjecten/{identifier}")
        decoded = self._decode(resp, _VerblijfsobjectResponse)

        verblijfsobject = decoded.verblijfsobject
        gebruiksdoel = ", ".join(verblijfsobject.gebruiksdoelen)

        results = []
        for link in decoded.links.maakt_deel_uit_van:
            pand = await self._fetch_pand(link.href)
            results.append(
                Pand(
                    identificatiecode=pand.identificatie,
                    geometry=pand.geometrie,
                    pandvlak=self._pandvlak(pand),
                    vloeroppervlak=verblijfsobject.oppervlakte,
                    bouwjaar=pand.oorspronkelijk_bouwjaar,
                    pandstatus=pand.status,
                    objectstatus=verblijfsobject.status,
                    gebruiksdoel=gebruiksdoel,
                )
            )

        logger.debug("bag object %s is part of %d panden", identifier, len(results))
        return results

    async def check_status(self) -> bool:
        """Check if the API is up by fetching the building of a well-known object."""
        panden = await self.get_panden(STATUS_REFERENCE_ID)
        if len(panden) != 1:
            logger.warning("bag status check: expected 1 pand, got %d", len(panden))
        return len(panden) == 1


class BagClientBuilder(CrsClientBuilder):
    client_class = BagClient

    def __init__(self, user_agent: str, api_key: str | None = None):
        super().__init__(user_agent)
        self._api_key = api_key

    def api_key(self, api_key: str):
        self._api_key = api_key
        return self

    def build(self) -> BagClient:
        return self.client_class(self._api_key, self._user_agent, **self._options)
