from typing import Protocol

from ..schemas import ListJobsRequest, ListJobsResponse, TriggerRequest, TriggerResponse


class GatewayError(Exception):
    """A failed call to the job gateway: network error, non-2xx status or a body we can't read.

    ``detail`` is the gateway's own ``detail`` payload when it sent one
    (a string, or a list of validation errors shaped like ``{"msg": ...}``).
    """

    def __init__(self, message: str, *, status_code: int | None = None, detail=None):
        super().__init__(message)
        self.status_code = status_code
        self.detail = detail

    def user_message(self, fallback: str) -> str:
        detail = self.detail
        if isinstance(detail, list):
            msgs = [str(d.get("msg")) for d in detail if isinstance(d, dict) and d.get("msg")]
            return ", ".join(msgs) if msgs else fallback
        if isinstance(detail, str) and detail.strip():
            return detail
        return fallback


class JobGateway(Protocol):
    async def list_jobs(self, request: ListJobsRequest) -> ListJobsResponse:
        ...

    async def trigger_fetch(self, config: TriggerRequest) -> TriggerResponse:
        ...
