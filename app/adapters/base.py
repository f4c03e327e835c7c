"""
Shared HTTP plumbing for upstream recipe providers.

Every provider call is one GET returning JSON. Failures (timeout, connection
error, non-2xx, undecodable body) are logged and reported as None so callers
can tell "provider failed" apart from "provider found nothing".
"""

import logging
import time
from typing import Any, List, Optional

import httpx

from app.services.prometheus_metrics import record_upstream_call

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0


class JSONProviderAdapter:
    """Base adapter: one async GET per call, errors converted to None."""

    name = "provider"

    def __init__(
        self,
        base_url: str,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    async def _get_json(
        self,
        path: str,
        params: Optional[dict[str, Any]] = None,
        *,
        operation: str,
        allow_not_found: bool = False,
    ) -> Optional[dict[str, Any]]:
        """
        GET a JSON object. Returns None on failure. With allow_not_found, a 404
        answers an empty object instead of counting as a failure.
        """
        url = f"{self.base_url}/{path.lstrip('/')}"
        start = time.perf_counter()
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self._transport
            ) as client:
                response = await client.get(url, params=params)
                response.raise_for_status()
                data = response.json()
        except httpx.TimeoutException as e:
            logger.warning("%s %s timed out: %s", self.name, operation, e)
            data = None
        except httpx.ConnectError as e:
            logger.warning("%s connection failed: %s", self.name, e)
            data = None
        except httpx.HTTPStatusError as e:
            if allow_not_found and e.response.status_code == 404:
                data = {}
            else:
                logger.warning(
                    "%s HTTP error %s on %s: %s",
                    self.name,
                    e.response.status_code,
                    operation,
                    e,
                )
                data = None
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("%s unexpected error on %s: %s", self.name, operation, e)
            data = None

        elapsed = time.perf_counter() - start
        if data is not None and not isinstance(data, dict):
            logger.warning("%s returned a non-object body on %s", self.name, operation)
            data = None
        record_upstream_call(self.name, operation, data is not None, elapsed)
        return data

    async def _get_list(
        self,
        path: str,
        params: Optional[dict[str, Any]],
        key: str,
        *,
        operation: str,
    ) -> Optional[List[dict[str, Any]]]:
        """GET and extract a list field. `key: null` means no results, not failure."""
        data = await self._get_json(path, params, operation=operation)
        if data is None:
            return None
        items = data.get(key)
        if items is None:
            return []
        if not isinstance(items, list):
            logger.warning("%s %s: '%s' is not a list", self.name, operation, key)
            return None
        return [item for item in items if isinstance(item, dict)]
