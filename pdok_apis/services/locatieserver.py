"""Client for the PDOK Locatieserver, the national geocoding service.

Used to resolve postal codes and house numbers into references to the
matching addresses, lots and buildings. See
https://www.pdok.nl/introductie/-/article/pdok-locatieserver for the
capabilities of the service.
"""

import logging
import re
from typing import Generic, TypeVar

from pydantic import BaseModel, Field

from pdok_apis.config import settings
from pdok_apis.errors import InvalidQueryError
from pdok_apis.models.address import AddressSuggestion, ResolvedAddress
from pdok_apis.services.base import BaseClient, ClientBuilder, make_configuration

logger = logging.getLogger(__name__)

# Castellastraat 26, Nijmegen
STATUS_REFERENCE_ID = "adr-5826c02550308f6da19e4feb5eb97ec8"

_POSTCODE_PATTERN = re.compile(r"^([1-9][0-9]{3})\s?([A-Za-z]{2})$")
_WKT_POINT = re.compile(r"POINT\(([0-9.]+)\s+([0-9.]+)\)")

DocT = TypeVar("DocT")


class _SuggestDoc(BaseModel):
    id: str
    type: str
    weergavenaam: str
    score: float


class _LookupDoc(BaseModel):
    id: str
    weergavenaam: str = ""
    gekoppeld_perceel: list[str] = Field(default_factory=list)
    nummeraanduiding_id: str | None = None
    adresseerbaarobject_id: str | None = None
    straatnaam: str | None = None
    huisnummer: int | None = None
    huisletter: str | None = None
    huisnummertoevoeging: str | None = None
    postcode: str | None = None
    woonplaatsnaam: str | None = None
    gemeentenaam: str | None = None
    provincienaam: str | None = None
    centroide_ll: str | None = None
    centroide_rd: str | None = None


class _SolrBody(BaseModel, Generic[DocT]):
    docs: list[DocT]


class _SolrResponse(BaseModel, Generic[DocT]):
    response: _SolrBody[DocT]


def _normalize_postcode(postal_code: str) -> str:
    m = _POSTCODE_PATTERN.match(postal_code.strip()) if postal_code else None
    if not m:
        raise InvalidQueryError(
            f"Invalid postal code: expected 4 digits and 2 letters, got '{postal_code}'",
            LookupClient.service,
        )
    return f"{m.group(1)}{m.group(2).upper()}"


def _parse_wkt_point(wkt: str | None) -> tuple[float, float] | None:
    if not wkt:
        return None
    m = _WKT_POINT.match(wkt)
    if not m:
        return None
    return float(m.group(1)), float(m.group(2))


def _to_suggestion(doc: _SuggestDoc) -> AddressSuggestion:
    return AddressSuggestion(
        id=doc.id,
        display_name=doc.weergavenaam,
        type=doc.type,
        score=doc.score,
    )


def _to_resolved_address(doc: _LookupDoc) -> ResolvedAddress:
    ll = _parse_wkt_point(doc.centroide_ll)
    rd = _parse_wkt_point(doc.centroide_rd)

    return ResolvedAddress(
        id=doc.id,
        gekoppeld_perceel=tuple(doc.gekoppeld_perceel),
        nummeraanduiding_id=doc.nummeraanduiding_id,
        adresseerbaar_object_id=doc.adresseerbaarobject_id,
        display_name=doc.weergavenaam,
        street=doc.straatnaam,
        house_number=str(doc.huisnummer) if doc.huisnummer else None,
        house_letter=doc.huisletter or None,
        addition=doc.huisnummertoevoeging or None,
        postcode=doc.postcode,
        city=doc.woonplaatsnaam,
        municipality=doc.gemeentenaam,
        province=doc.provincienaam,
        latitude=ll[1] if ll else None,
        longitude=ll[0] if ll else None,
        rd_x=rd[0] if rd else None,
        rd_y=rd[1] if rd else None,
    )


class LookupClient(BaseClient):
    service = "locatieserver"

    def __init__(
        self,
        user_agent: str,
        *,
        connection_timeout_secs: float | None = None,
        request_timeout_secs: float | None = None,
        base_url: str | None = None,
    ):
        super().__init__(
            make_configuration(
                self.service,
                user_agent,
                base_url=base_url or settings.locatieserver_base,
                connection_timeout=(
                    connection_timeout_secs
                    if connection_timeout_secs is not None
                    else settings.locatieserver_connection_timeout
                ),
                request_timeout=(
                    request_timeout_secs
                    if request_timeout_secs is not None
                    else settings.locatieserver_request_timeout
                ),
            )
        )

    async def suggest_concrete(
        self, postal_code: str, house_number: str
    ) -> list[AddressSuggestion]:
        """Geocode a postal code and house number into a ranked list of matches."""
        postcode = _normalize_postcode(postal_code)
        house_number = (house_number or "").strip()
        if not house_number:
            raise InvalidQueryError("House number must not be empty", self.service)

        resp = await self._get("/suggest", params={"q": f"postcode:{postcode} {house_number}"})
        data = self._decode(resp, _SolrResponse[_SuggestDoc])

        return [_to_suggestion(doc) for doc in data.response.docs]

    async def lookup(self, locatieserver_id: str) -> ResolvedAddress | None:
        """Resolve a locatieserver id to the full address, with its lot and building references."""
        if not locatieserver_id:
            raise InvalidQueryError("Locatieserver id must not be empty", self.service)

        resp = await self._get("/lookup", params={"id": locatieserver_id, "fl": "*"})
        data = self._decode(resp, _SolrResponse[_LookupDoc])

        docs = data.response.docs
        if not docs:
            return None
        return _to_resolved_address(docs[0])

    async def suggest_addresses_for_lot(
        self, municipality_code: str, section_letter: str, lot_number: str
    ) -> list[AddressSuggestion]:
        """Suggest the addresses located on a cadastral lot."""
        if not (municipality_code and section_letter and lot_number):
            raise InvalidQueryError(
                "Municipality code, section letter and lot number are required", self.service
            )

        # e.g. gekoppeld_perceel:HTT02-M-5038
        query = f"gekoppeld_perceel:{municipality_code}-{section_letter}-{lot_number}"
        resp = await self._get("/free", params={"q": query, "fq": "type:adres"})
        data = self._decode(resp, _SolrResponse[_SuggestDoc])

        return [_to_suggestion(doc) for doc in data.response.docs]

    async def check_status(self) -> bool:
        """Check if the service is up by looking up a well-known address."""
        resolved = await self.lookup(STATUS_REFERENCE_ID)
        if resolved is None:
            logger.warning("locatieserver status check: reference address not found")
        return resolved is not None


class LookupClientBuilder(ClientBuilder):
    client_class = LookupClient
