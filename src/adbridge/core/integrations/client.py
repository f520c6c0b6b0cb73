"""Integration API client.

Binds an adapter to a pooled ``httpx.AsyncClient`` so vendor-specific
modules (campaign sync, metrics fetch, creative fetch) issue every call
through the resilient executor.
"""

import logging
import random
from dataclasses import replace
from types import TracebackType
from typing import Any, Optional, Type

import httpx

from adbridge.config.loader import DEFAULT_REQUEST_TIMEOUT, IntegrationSettings, load_settings
from adbridge.core.integrations.adapters import AdapterConfig, get_adapter
from adbridge.core.integrations.resilience.execution import execute_request
from adbridge.core.integrations.resilience.models import (
    RequestBody,
    RequestDescriptor,
    RequestResult,
    SleepFunc,
)
from adbridge.core.integrations.resilience.observer import RequestObserver

logger = logging.getLogger(__name__)


class IntegrationApiClient:
    """Async client for one ad platform.

    Example:
        async with create_client("tiktok", access_token=token) as client:
            result = await client.get(
                "/campaign/get/",
                operation="list_campaigns",
                params={"advertiser_id": advertiser_id},
            )
    """

    def __init__(
        self,
        adapter: AdapterConfig,
        *,
        http_client: Optional[httpx.AsyncClient] = None,
        observer: Optional[RequestObserver] = None,
        sleep_func: Optional[SleepFunc] = None,
        rng: Optional[random.Random] = None,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
        time_budget: Optional[float] = None,
    ):
        self.adapter = adapter
        self._owns_client = http_client is None
        self._http_client = http_client or httpx.AsyncClient(timeout=timeout)
        self._observer = observer
        self._sleep_func = sleep_func
        self._rng = rng
        self._time_budget = time_budget

    @property
    def platform_id(self) -> str:
        return self.adapter.platform_id

    async def execute(self, descriptor: RequestDescriptor) -> RequestResult:
        """Run *descriptor* through the resilient executor."""
        if descriptor.time_budget is None and self._time_budget is not None:
            descriptor = replace(descriptor, time_budget=self._time_budget)
        return await execute_request(
            self.adapter,
            descriptor,
            http_client=self._http_client,
            observer=self._observer,
            sleep_func=self._sleep_func,
            rng=self._rng,
        )

    async def get(self, url: str, *, operation: str, **kwargs: Any) -> RequestResult:
        return await self.execute(
            RequestDescriptor(url=url, operation=operation, method="GET", **kwargs)
        )

    async def post(
        self,
        url: str,
        *,
        operation: str,
        body: Optional[RequestBody] = None,
        **kwargs: Any,
    ) -> RequestResult:
        return await self.execute(
            RequestDescriptor(url=url, operation=operation, method="POST", body=body, **kwargs)
        )

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._owns_client:
            await self._http_client.aclose()
            logger.debug("Closed HTTP client for %s", self.platform_id)

    async def __aenter__(self) -> "IntegrationApiClient":
        return self

    async def __aexit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> None:
        await self.aclose()


def create_client(
    platform_id: str,
    settings: Optional[IntegrationSettings] = None,
    *,
    http_client: Optional[httpx.AsyncClient] = None,
    observer: Optional[RequestObserver] = None,
    **adapter_kwargs: Any,
) -> IntegrationApiClient:
    """Build a client whose adapter carries the platform's configured retry policy.

    Args:
        platform_id: ``meta``, ``google``, ``linkedin`` or ``tiktok``
        settings: Resolved settings; loaded from file/environment when omitted
        http_client: Shared client to send through
        observer: Per-attempt log sink
        **adapter_kwargs: Passed to the platform's adapter builder

    Raises:
        ValueError: If the platform id is unknown.
    """
    settings = settings or load_settings()
    adapter = get_adapter(
        platform_id, retry_config=settings.retry_for(platform_id), **adapter_kwargs
    )
    return IntegrationApiClient(
        adapter,
        http_client=http_client,
        observer=observer,
        timeout=settings.request_timeout,
        time_budget=settings.time_budget,
    )
