from fastapi import APIRouter, Path, Request

from pdok_apis.api.errors import to_http_exception
from pdok_apis.errors import PdokError
from pdok_apis.models.address import AddressSuggestion
from pdok_apis.models.lot import Lot

router = APIRouter(prefix="/lots", tags=["lots"])

_LOT_PATH = "/{municipality_code}/{section_letter}/{lot_number}"


@router.get(_LOT_PATH, response_model=Lot)
async def lot(
    request: Request,
    municipality_code: str = Path(..., pattern=r"^[A-Za-z0-9]+$"),
    section_letter: str = Path(..., pattern=r"^[A-Za-z]$"),
    lot_number: str = Path(..., pattern=r"^[0-9]+$"),
):
    """Fetch a cadastral lot from the BRK."""
    try:
        return await request.app.state.brk_client.get_lot(
            municipality_code, section_letter, lot_number
        )
    except PdokError as exc:
        raise to_http_exception(exc) from exc


@router.get(_LOT_PATH + "/addresses", response_model=list[AddressSuggestion])
async def lot_addresses(
    request: Request,
    municipality_code: str = Path(..., pattern=r"^[A-Za-z0-9]+$"),
    section_letter: str = Path(..., pattern=r"^[A-Za-z]$"),
    lot_number: str = Path(..., pattern=r"^[0-9]+$"),
):
    """Suggest the addresses located on a cadastral lot."""
    try:
        return await request.app.state.lookup_client.suggest_addresses_for_lot(
            municipality_code, section_letter, lot_number
        )
    except PdokError as exc:
        raise to_http_exception(exc) from exc
