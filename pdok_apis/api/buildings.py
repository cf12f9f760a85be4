import logging

from fastapi import APIRouter, HTTPException, Path, Request

from pdok_apis.api.errors import to_http_exception
from pdok_apis.errors import PdokError
from pdok_apis.models.building import Pand

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/buildings", tags=["buildings"])


@router.get("/{object_id}", response_model=list[Pand])
async def buildings(
    request: Request,
    object_id: str = Path(..., pattern=r"^[0-9]{16}$"),
):
    """Fetch the BAG panden a verblijfsobject is part of."""
    client = request.app.state.bag_client
    if client is None:
        logger.warning("buildings requested but no BAG API key is configured")
        raise HTTPException(status_code=503, detail="BAG API key not configured")

    try:
        return await client.get_panden(object_id)
    except PdokError as exc:
        raise to_http_exception(exc) from exc
