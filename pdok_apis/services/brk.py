"""Client for the Basisregistratie Kadaster (BRK) kadastrale kaart, published by PDOK.

Used to look up lots. See
https://www.pdok.nl/introductie/-/article/basisregistratie-kadaster-brk-
for the capabilities of the service.
"""

import logging
import re
from typing import Any

from pydantic import BaseModel, Field

from pdok_apis.config import settings
from pdok_apis.errors import InvalidQueryError, NotFoundError
from pdok_apis.models.crs import CoordinateSpace
from pdok_apis.models.lot import Lot
from pdok_apis.services.base import BaseClient, CrsClientBuilder, make_configuration

logger = logging.getLogger(__name__)

LOT_TYPENAME = "kadastralekaartv5:perceel"

# Lot of Castellastraat 26, Nijmegen
STATUS_REFERENCE_LOT = ("HTT02", "M", "5038")

_MUNICIPALITY_CODE_PATTERN = re.compile(r"^[A-Za-z0-9]+$")
_SECTION_PATTERN = re.compile(r"^[A-Za-z]$")
_LOT_NUMBER_PATTERN = re.compile(r"^[0-9]+$")

_LOT_FILTER = """<Filter>
  <And>
    <And>
      <PropertyIsEqualTo>
        <PropertyName>sectie</PropertyName>
        <Literal>{section_letter}</Literal>
      </PropertyIsEqualTo>
      <PropertyIsEqualTo>
        <PropertyName>perceelnummer</PropertyName>
        <Literal>{lot_number}</Literal>
      </PropertyIsEqualTo>
    </And>
    <PropertyIsEqualTo>
      <PropertyName>AKRKadastraleGemeenteCodeWaarde</PropertyName>
      <Literal>{municipality_code}</Literal>
    </PropertyIsEqualTo>
  </And>
</Filter>"""


class _LotProperties(BaseModel):
    identificatie_lokaal_id: str = Field(alias="identificatieLokaalID")
    kadastrale_gemeente_waarde: str | None = Field(default=None, alias="kadastraleGemeenteWaarde")
    kadastrale_gemeente_code: str = Field(alias="AKRKadastraleGemeenteCodeWaarde")
    kadastrale_grootte: float | None = Field(default=None, alias="kadastraleGrootteWaarde")
    sectie: str
    perceelnummer: int


class _LotFeature(BaseModel):
    properties: _LotProperties
    geometry: dict[str, Any]


class _LotFeatureCollection(BaseModel):
    features: list[_LotFeature]


def _validate_lot_code(municipality_code: str, section_letter: str, lot_number: str) -> None:
    if not municipality_code or not _MUNICIPALITY_CODE_PATTERN.match(municipality_code):
        raise InvalidQueryError(
            f"Invalid municipality code: '{municipality_code}'", BrkClient.service
        )
    if not section_letter or not _SECTION_PATTERN.match(section_letter):
        raise InvalidQueryError(
            f"Invalid section: must be a single letter, got '{section_letter}'", BrkClient.service
        )
    if not lot_number or not _LOT_NUMBER_PATTERN.match(lot_number):
        raise InvalidQueryError(
            f"Invalid lot number: must be digits, got '{lot_number}'", BrkClient.service
        )


def _to_lot(feature: _LotFeature) -> Lot:
    props = feature.properties
    return Lot(
        id=props.identificatie_lokaal_id,
        municipality_name=props.kadastrale_gemeente_waarde,
        municipality_code=props.kadastrale_gemeente_code,
        section_letter=props.sectie,
        lot_number=str(props.perceelnummer),
        area=props.kadastrale_grootte,
        geometry=feature.geometry,
    )


class BrkClient(BaseClient):
    service = "brk"
    status_errors = {404: NotFoundError}

    def __init__(
        self,
        user_agent: str,
        *,
        accept_crs: CoordinateSpace | None = None,
        connection_timeout_secs: float | None = None,
        request_timeout_secs: float | None = None,
        base_url: str | None = None,
    ):
        super().__init__(
            make_configuration(
                self.service,
                user_agent,
                base_url=base_url or settings.brk_wfs_base,
                accepted_crs=accept_crs or settings.brk_accept_crs,
                connection_timeout=(
                    connection_timeout_secs
                    if connection_timeout_secs is not None
                    else settings.brk_connection_timeout
                ),
                request_timeout=(
                    request_timeout_secs
                    if request_timeout_secs is not None
                    else settings.brk_request_timeout
                ),
            )
        )

    async def get_lot(self, municipality_code: str, section_letter: str, lot_number: str) -> Lot:
        """Fetch a single lot by its municipality code, section and lot number."""
        municipality_code = (municipality_code or "").upper()
        section_letter = (section_letter or "").upper()
        _validate_lot_code(municipality_code, section_letter, lot_number)

        lot_filter = _LOT_FILTER.format(
            section_letter=section_letter,
            lot_number=lot_number,
            municipality_code=municipality_code,
        )
        resp = await self._get(
            self.config.base_url,
            params={
                "request": "GetFeature",
                "service": "WFS",
                "version": "2.0.0",
                "typenames": LOT_TYPENAME,
                "outputFormat": "application/json",
                "srsName": self.config.accepted_crs.srs_name,
                "filter": lot_filter,
            },
        )
        collection = self._decode(resp, _LotFeatureCollection)

        lot_code = f"{municipality_code}-{section_letter}-{lot_number}"
        if not collection.features:
            raise NotFoundError(f"No lot found for {lot_code}", self.service)
        if len(collection.features) > 1:
            logger.warning(
                "brk returned %d lots for %s, using the first",
                len(collection.features),
                lot_code,
            )

        return _to_lot(collection.features[0])

    async def check_status(self) -> bool:
        """Check if the API is up by fetching a well-known lot."""
        lot = await self.get_lot(*STATUS_REFERENCE_LOT)
        return lot.lot_number == STATUS_REFERENCE_LOT[2]


class BrkClientBuilder(CrsClientBuilder):
    client_class = BrkClient
