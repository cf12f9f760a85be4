from fastapi import APIRouter

from pdok_apis.api.address import router as address_router
from pdok_apis.api.buildings import router as buildings_router
from pdok_apis.api.lots import router as lots_router

router = APIRouter(prefix="/api")
router.include_router(address_router)
router.include_router(buildings_router)
router.include_router(lots_router)
