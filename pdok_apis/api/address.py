from fastapi import APIRouter, HTTPException, Query, Request

from pdok_apis.api.errors import to_http_exception
from pdok_apis.errors import PdokError
from pdok_apis.models.address import AddressSuggestion, ResolvedAddress

router = APIRouter(prefix="/address", tags=["address"])


@router.get("/suggest", response_model=list[AddressSuggestion])
async def address_suggest(
    request: Request,
    postcode: str = Query(..., description="Postal code, e.g. 6542WZ"),
    huisnummer: str = Query(..., min_length=1, description="House number"),
):
    """Geocode a postal code and house number with the PDOK Locatieserver."""
    try:
        return await request.app.state.lookup_client.suggest_concrete(postcode, huisnummer)
    except PdokError as exc:
        raise to_http_exception(exc) from exc


@router.get("/lookup", response_model=ResolvedAddress)
async def address_lookup(
    request: Request,
    id: str = Query(..., description="Locatieserver document ID"),
):
    """Resolve a locatieserver suggestion to full address details."""
    try:
        resolved = await request.app.state.lookup_client.lookup(id)
    except PdokError as exc:
        raise to_http_exception(exc) from exc

    if resolved is None:
        raise HTTPException(status_code=404, detail="Address not found")
    return resolved
