"""Shared fetch helper for JSON-over-HTTP systems of record."""

from __future__ import annotations

from typing import TYPE_CHECKING

import httpx
from pydantic import ValidationError

from propsync.adapters.http_resilience import default_client_factory, describe_http_error
from propsync.domain.errors import AdapterUnavailable

if TYPE_CHECKING:
    from collections.abc import Callable

    from pydantic import TypeAdapter

    from propsync.adapters.http_resilience import ResilientClient
    from propsync.config.http_resilience import ResilienceConfig

type ClientFactory = Callable[[ResilienceConfig], ResilientClient]


async def fetch_records[T](
    *,
    source_id: str,
    resilience: ResilienceConfig,
    path: str,
    records: TypeAdapter[list[T]],
    client_factory: ClientFactory | None = None,
) -> list[T]:
    """GET ``path`` and validate the body, mapping every failure to ``AdapterUnavailable``."""

    factory = client_factory or default_client_factory
    try:
        async with factory(resilience) as client:
            response = await client.get(path)
            response.raise_for_status()
            payload = response.json()
    except httpx.HTTPError as exc:
        raise AdapterUnavailable(source_id, describe_http_error(exc)) from exc
    except ValueError as exc:
        raise AdapterUnavailable(source_id, f"response is not JSON: {exc}") from exc

    try:
        return records.validate_python(payload)
    except ValidationError as exc:
        raise AdapterUnavailable(
            source_id, f"malformed payload ({exc.error_count()} validation errors)"
        ) from exc
