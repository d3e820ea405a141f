# dashboard/gateway/http.py
import logging

import httpx
from pydantic import ValidationError
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from .base import GatewayError, JobGateway
from ..config import settings
from ..schemas import ListJobsRequest, ListJobsResponse, TriggerRequest, TriggerResponse

log = logging.getLogger(__name__)

LIST_PATH = "/jobs/all"
TRIGGER_PATH = "/lambda/trigger"


def _detail_of(resp: httpx.Response):
    try:
        body = resp.json()
    except ValueError:
        return None
    return body.get("detail") if isinstance(body, dict) else None


def _to_gateway_error(err: httpx.HTTPError) -> GatewayError:
    if isinstance(err, httpx.HTTPStatusError):
        code = err.response.status_code
        return GatewayError(f"gateway returned HTTP {code}", status_code=code, detail=_detail_of(err.response))
    return GatewayError(f"gateway unreachable: {err}")


class HttpJobGateway(JobGateway):
    """Talks to the collection backend over REST."""

    def __init__(self, base_url: str | None = None, *, timeout: float | None = None,
                 transport: httpx.AsyncBaseTransport | None = None):
        self.base_url = (base_url or settings.GATEWAY_BASE_URL).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.GATEWAY_TIMEOUT
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            headers={"Content-Type": "application/json"},
            transport=self._transport,
        )

    # listing is idempotent, so transport failures are retried; triggers are not
    @retry(
        wait=wait_exponential(min=1, max=8),
        stop=stop_after_attempt(settings.GATEWAY_RETRIES),
        retry=retry_if_exception_type(httpx.TransportError),
        reraise=True,
    )
    async def _get(self, path: str, params: dict) -> httpx.Response:
        async with self._client() as client:
            r = await client.get(path, params=params)
            r.raise_for_status()
            return r

    async def _post(self, path: str, body: dict) -> httpx.Response:
        async with self._client() as client:
            r = await client.post(path, json=body)
            r.raise_for_status()
            return r

    async def list_jobs(self, request: ListJobsRequest) -> ListJobsResponse:
        params = request.to_params()
        log.debug("[gateway] GET %s %s", LIST_PATH, params)
        try:
            r = await self._get(LIST_PATH, params)
        except httpx.HTTPError as e:
            raise _to_gateway_error(e) from e
        try:
            return ListJobsResponse.model_validate(r.json())
        except ValidationError as e:
            raise GatewayError("malformed job list from gateway", status_code=r.status_code) from e
        except ValueError as e:
            raise GatewayError("gateway sent a non-JSON job list", status_code=r.status_code) from e

    async def trigger_fetch(self, config: TriggerRequest) -> TriggerResponse:
        body = config.model_dump()
        log.debug("[gateway] POST %s %s", TRIGGER_PATH, body)
        try:
            r = await self._post(TRIGGER_PATH, body)
        except httpx.HTTPError as e:
            raise _to_gateway_error(e) from e
        try:
            return TriggerResponse.model_validate(r.json())
        except ValidationError as e:
            raise GatewayError("malformed trigger response from gateway", status_code=r.status_code) from e
        except ValueError as e:
            raise GatewayError("gateway sent a non-JSON trigger response", status_code=r.status_code) from e
