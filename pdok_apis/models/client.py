from pydantic import BaseModel, ConfigDict

from pdok_apis.models.crs import CoordinateSpace


class ClientConfiguration(BaseModel):
    model_config = ConfigDict(frozen=True)

    user_agent: str
    base_url: str
    api_key: str | None = None
    accepted_crs: CoordinateSpace | None = None
    connection_timeout: float
    request_timeout: float
