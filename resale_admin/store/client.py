from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Mapping

import httpx
from opentelemetry import trace

from .credentials import ANONYMOUS, Credentials

if TYPE_CHECKING:  # pragma: no cover
    from resale_admin.core.config import Settings

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

TICKETS = "tickets"
ORDERS = "orders"
CUSTOMERS = "customers"


class EntityStoreError(RuntimeError):
    """Transport failure or non-success response from the entity store."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        response: httpx.Response | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.response = response


def unwrap_collection(data: Any) -> list[Any]:
    """Return the records of a list response or of a ``results`` envelope."""

    if isinstance(data, list):
        return list(data)
    if isinstance(data, Mapping):
        results = data.get("results")
        if isinstance(results, list):
            return list(results)
    return []


def _decode_body(response: httpx.Response) -> Any:
    content_type = response.headers.get("Content-Type", "")
    if "application/json" in content_type and response.content:
        try:
            return response.json()
        except ValueError:
            return response.text
    return response.text


def _write_error_message(response: httpx.Response, body: Any) -> str:
    if isinstance(body, str):
        message = body.strip()
    else:
        message = json.dumps(body, separators=(",", ":"), ensure_ascii=False)
    return message or f"Failed to update ticket ({response.status_code})"


@dataclass(slots=True)
class EntityStoreClient:
    """Async REST client for the ``tickets``, ``orders`` and ``customers`` resources."""

    base_url: str
    credentials: Credentials = ANONYMOUS
    prefix: str = "/api"
    read_timeout: float | None = 10.0
    transport: httpx.AsyncBaseTransport | None = None

    @classmethod
    def from_settings(
        cls,
        settings: "Settings",
        *,
        credentials: Credentials | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "EntityStoreClient":
        return cls(
            base_url=settings.api_base_url,
            credentials=credentials if credentials is not None else settings.credentials(),
            prefix=settings.api_prefix,
            read_timeout=settings.read_timeout,
            transport=transport,
        )

    def _build_url(self, path: str) -> str:
        prefix = self.prefix.strip("/")
        normalized = path if path.startswith("/") else f"/{path}"
        if prefix:
            normalized = f"/{prefix}{normalized}"
        return f"{self.base_url.rstrip('/')}{normalized}"

    async def _send(
        self,
        method: str,
        path: str,
        *,
        timeout: float | None,
        **kwargs: Any,
    ) -> httpx.Response:
        url = self._build_url(path)
        headers: dict[str, str] = {"Accept": "application/json"}
        headers.update(self.credentials.authorization_headers())
        headers.update(kwargs.pop("headers", {}))

        with tracer.start_as_current_span("entity_store.request") as span:
            span.set_attribute("http.method", method)
            span.set_attribute("http.url", url)
            try:
                async with httpx.AsyncClient(transport=self.transport, timeout=timeout) as client:
                    response = await client.request(method, url, headers=headers, **kwargs)
            except (httpx.HTTPError, httpx.InvalidURL) as exc:
                logger.error("%s %s failed: %s", method, url, exc)
                raise EntityStoreError(f"Entity store request failed: {exc}") from exc
            span.set_attribute("http.status_code", response.status_code)

        logger.debug("%s %s -> %s", method, url, response.status_code)
        return response

    async def list_collection(self, name: str) -> list[Any]:
        response = await self._send("GET", f"/{name}/", timeout=self.read_timeout)
        if not response.is_success:
            raise EntityStoreError(
                f"Failed to fetch ({response.status_code})",
                status_code=response.status_code,
                response=response,
            )

        try:
            data = response.json()
        except ValueError:
            logger.warning("Collection '%s' returned a non-JSON body; treating it as empty", name)
            return []

        if not isinstance(data, (list, Mapping)) or (
            isinstance(data, Mapping) and not isinstance(data.get("results"), list)
        ):
            logger.warning("Collection '%s' returned an unexpected shape; treating it as empty", name)
        return unwrap_collection(data)

    async def list_tickets(self) -> list[Any]:
        return await self.list_collection(TICKETS)

    async def list_orders(self) -> list[Any]:
        return await self.list_collection(ORDERS)

    async def list_customers(self) -> list[Any]:
        return await self.list_collection(CUSTOMERS)

    async def patch_ticket(self, ticket_id: Any, payload: Mapping[str, Any]) -> Any:
        """Apply a partial update; writes are never timed out."""

        response = await self._send(
            "PATCH",
            f"/{TICKETS}/{ticket_id}/",
            timeout=None,
            json=dict(payload),
            headers={"Content-Type": "application/json"},
        )
        body = _decode_body(response)
        if not response.is_success:
            raise EntityStoreError(
                _write_error_message(response, body),
                status_code=response.status_code,
                response=response,
            )
        return body
