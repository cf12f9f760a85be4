from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from pdok_apis.api.router import router
from pdok_apis.config import settings
from pdok_apis.services.bag import BagClientBuilder
from pdok_apis.services.brk import BrkClientBuilder
from pdok_apis.services.locatieserver import LookupClientBuilder


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.lookup_client = LookupClientBuilder(settings.user_agent).build()
    app.state.brk_client = BrkClientBuilder(settings.user_agent).build()
    app.state.bag_client = (
        BagClientBuilder(settings.user_agent, settings.bag_api_key).build()
        if settings.bag_api_key
        else None
    )
    yield
    await app.state.lookup_client.aclose()
    await app.state.brk_client.aclose()
    if app.state.bag_client is not None:
        await app.state.bag_client.aclose()


app = FastAPI(
    title="pdok-apis",
    version="0.1.0",
    description="Address, building and lot lookups against PDOK and the Kadaster",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET"],
    allow_headers=["*"],
)

app.include_router(router)


@app.get("/health")
async def health():
    return {"status": "ok"}
