from pydantic_settings import BaseSettings

from pdok_apis.models.crs import CoordinateSpace


class Settings(BaseSettings):
    # External API base URLs
    locatieserver_base: str = "https://api.pdok.nl/bzk/locatieserver/search/v3_1"
    bag_api_base: str = "https://api.bag.kadaster.nl/lvbag/individuelebevragingen/v2"
    brk_wfs_base: str = "https://service.pdok.nl/kadaster/kadastralekaart/wfs/v5_0"

    # Timeouts (seconds)
    locatieserver_connection_timeout: float = 10.0
    locatieserver_request_timeout: float = 30.0
    bag_connection_timeout: float = 5.0
    bag_request_timeout: float = 20.0
    brk_connection_timeout: float = 5.0
    brk_request_timeout: float = 20.0

    # Coordinate reference systems
    bag_accept_crs: CoordinateSpace = CoordinateSpace.rijksdriehoek
    brk_accept_crs: CoordinateSpace = CoordinateSpace.gps

    # HTTP service
    user_agent: str = "pdok-apis"
    bag_api_key: str | None = None
    cors_origins: list[str] = ["http://localhost:5173"]

    model_config = {"env_prefix": "PDOK_"}


settings = Settings()
