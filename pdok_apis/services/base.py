import asyncio
import logging
from typing import Any, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from pdok_apis.errors import (
    ConfigurationError,
    MalformedResponseError,
    NetworkError,
    PdokError,
    UpstreamError,
    UpstreamTimeoutError,
)
from pdok_apis.models.client import ClientConfiguration
from pdok_apis.models.crs import CoordinateSpace

logger = logging.getLogger(__name__)

SchemaT = TypeVar("SchemaT", bound=BaseModel)


def make_configuration(
    service: str,
    user_agent: str | None,
    *,
    base_url: str,
    connection_timeout: float,
    request_timeout: float,
    api_key: str | None = None,
    accepted_crs: CoordinateSpace | None = None,
    requires_api_key: bool = False,
) -> ClientConfiguration:
    """Validate client settings and freeze them into a ClientConfiguration."""
    if not user_agent:
        raise ConfigurationError("user_agent", service)
    if requires_api_key and not api_key:
        raise ConfigurationError("api_key", service)
    if not base_url:
        raise ConfigurationError("base_url", service)
    if connection_timeout <= 0:
        raise ConfigurationError("connection_timeout", service, reason="must be positive")
    if request_timeout <= 0:
        raise ConfigurationError("request_timeout", service, reason="must be positive")

    if accepted_crs is not None:
        try:
            accepted_crs = CoordinateSpace(accepted_crs)
        except ValueError as exc:
            raise ConfigurationError(
                "accepted_crs", service, reason=f"unknown coordinate space '{accepted_crs}'"
            ) from exc

    return ClientConfiguration(
        user_agent=user_agent,
        base_url=base_url,
        api_key=api_key,
        accepted_crs=accepted_crs,
        connection_timeout=connection_timeout,
        request_timeout=request_timeout,
    )


class BaseClient:
    """Request dispatch and error classification shared by the PDOK clients."""

    service: str = "pdok"

    # Status codes with a dedicated error type; other non-2xx codes raise UpstreamError.
    status_errors: dict[int, type[PdokError]] = {}

    def __init__(self, config: ClientConfiguration):
        self.config = config
        self._client: httpx.AsyncClient | None = None

    def _default_headers(self) -> dict[str, str]:
        headers = {"User-Agent": self.config.user_agent}
        if self.config.accepted_crs is not None:
            # Gewenste coördinatenstelsel (CRS) van de coördinaten in de response.
            headers["Accept-Crs"] = self.config.accepted_crs.accept_crs
        return headers

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.config.base_url,
                headers=self._default_headers(),
                timeout=httpx.Timeout(
                    self.config.request_timeout, connect=self.config.connection_timeout
                ),
            )
        return self._client

    async def aclose(self) -> None:
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
        self._client = None

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def _get(self, url: str, params: dict[str, Any] | None = None) -> httpx.Response:
        """GET ``url`` within the request timeout, raising a classified error on failure."""
        client = self._get_client()
        logger.debug("%s GET %s params=%s", self.service, url, params)

        try:
            resp = await asyncio.wait_for(
                client.get(url, params=params),
                timeout=self.config.request_timeout,
            )
        except (asyncio.TimeoutError, httpx.TimeoutException) as exc:
            logger.warning("%s request to %s timed out", self.service, url)
            raise UpstreamTimeoutError(
                f"{self.service} request timed out: {url}", self.service
            ) from exc
        except httpx.HTTPError as exc:
            logger.warning("%s request to %s failed: %s", self.service, url, exc)
            raise NetworkError(f"{self.service} request failed: {exc}", self.service) from exc

        self._raise_for_status(resp)
        return resp

    def _raise_for_status(self, resp: httpx.Response) -> None:
        if resp.is_success:
            return

        logger.warning(
            "%s answered %d for %s", self.service, resp.status_code, resp.request.url
        )
        message = f"{self.service} answered {resp.status_code} for {resp.request.url}"
        error_type = self.status_errors.get(resp.status_code)
        if error_type is not None:
            raise error_type(message, self.service)
        raise UpstreamError(message, resp.status_code, self.service)

    def _decode(self, resp: httpx.Response, schema: type[SchemaT]) -> SchemaT:
        try:
            return schema.model_validate_json(resp.content)
        except ValidationError as exc:
            logger.warning("%s returned an unexpected body: %s", self.service, exc)
            raise MalformedResponseError(
                f"{self.service} returned an unexpected body", self.service
            ) from exc


class ClientBuilder:
    """Chainable construction of a client; ``build()`` validates and creates it."""

    client_class: type[BaseClient]

    def __init__(self, user_agent: str):
        self._user_agent = user_agent
        self._options: dict[str, Any] = {}

    def connection_timeout_secs(self, connection_timeout_secs: float):
        self._options["connection_timeout_secs"] = connection_timeout_secs
        return self

    def request_timeout_secs(self, request_timeout_secs: float):
        self._options["request_timeout_secs"] = request_timeout_secs
        return self

    def base_url(self, base_url: str):
        self._options["base_url"] = base_url
        return self

    def build(self):
        return self.client_class(self._user_agent, **self._options)


class CrsClientBuilder(ClientBuilder):
    def accept_crs(self, accept_crs: CoordinateSpace):
        self._options["accept_crs"] = accept_crs
        return self
