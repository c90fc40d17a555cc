from __future__ import annotations

import asyncio
import logging
from collections.abc import Collection
from time import perf_counter

from geocoding_core.errors import (
    NoProvidersConfiguredError,
    NoProvidersSucceededError,
    NoResultsFromProviderError,
)
from geocoding_core.factory import ProviderFactory
from geocoding_core.handle import ProviderHandle
from geocoding_core.models import GeocodeResponse
from geocoding_core.ports import ProviderCallObserver, ProviderConfigSource

logger = logging.getLogger(__name__)


def _discard_outcome(task: asyncio.Task) -> None:
    if not task.cancelled():
        task.exception()


class ProviderAggregator:
    """Fans geocoding requests out to the configured providers.

    The provider set is read from the configuration source on every call, so providers
    added or removed at runtime take effect on the next request.
    """

    def __init__(
        self,
        source: ProviderConfigSource,
        factory: ProviderFactory,
        observer: ProviderCallObserver | None = None,
    ) -> None:
        self._source = source
        self._factory = factory
        self._observer = observer

    async def race_best(self, address: str) -> GeocodeResponse:
        handles = await self._load_handles()
        if not handles:
            raise NoProvidersConfiguredError(address)

        best_priority = min(handle.priority for handle in handles)
        candidates = [handle for handle in handles if handle.priority == best_priority]
        logger.info(
            "race_started",
            extra={"priority": best_priority, "providers": [handle.name for handle in candidates]},
        )

        pending = {asyncio.create_task(self._invoke(handle, address)): handle for handle in candidates}
        try:
            while pending:
                done, _ = await asyncio.wait(pending, return_when=asyncio.FIRST_COMPLETED)
                winner: tuple[ProviderHandle, GeocodeResponse] | None = None
                for task in done:
                    handle = pending.pop(task)
                    exc = task.exception()
                    if exc is not None:
                        self._log_failure(handle, exc, mode="race_best")
                    elif winner is None:
                        winner = (handle, task.result())
                if winner is not None:
                    logger.info(
                        "race_winner_selected",
                        extra={"provider": winner[0].name, "abandoned": len(pending)},
                    )
                    return winner[1]
        finally:
            for task in pending:
                task.cancel()
                task.add_done_callback(_discard_outcome)

        raise NoProvidersSucceededError(address)

    async def all(self, address: str) -> list[GeocodeResponse]:
        handles = await self._load_handles()
        outcomes = await self._fan_out(handles, address, mode="all")
        logger.info(
            "fan_out_completed",
            extra={"mode": "all", "providers": len(handles), "succeeded": len(outcomes)},
        )
        return [response for _, response in outcomes]

    async def grouped(self, address: str, priorities: Collection[int]) -> dict[str, list[GeocodeResponse]]:
        wanted = set(priorities)
        handles = [handle for handle in await self._load_handles() if handle.priority in wanted]
        outcomes = await self._fan_out(handles, address, mode="grouped")
        grouped: dict[str, list[GeocodeResponse]] = {}
        for handle, response in outcomes:
            grouped.setdefault(handle.name, []).append(response)
        logger.info(
            "fan_out_completed",
            extra={"mode": "grouped", "priorities": sorted(wanted), "providers": len(handles), "succeeded": len(outcomes)},
        )
        return grouped

    async def by_name(self, address: str, name: str) -> GeocodeResponse:
        configs = await self._source.list_provider_configs()
        handle = self._factory.build(configs, name)
        response = await self._invoke(handle, address)
        if not response.results:
            raise NoResultsFromProviderError(handle.name)
        return response

    async def _load_handles(self) -> list[ProviderHandle]:
        configs = await self._source.list_provider_configs()
        return self._factory.build_all(configs)

    async def _fan_out(
        self,
        handles: list[ProviderHandle],
        address: str,
        *,
        mode: str,
    ) -> list[tuple[ProviderHandle, GeocodeResponse]]:
        tasks = [asyncio.create_task(self._settle(handle, address, mode=mode)) for handle in handles]
        outcomes: list[tuple[ProviderHandle, GeocodeResponse]] = []
        try:
            for next_done in asyncio.as_completed(tasks):
                handle, response = await next_done
                if response is not None:
                    outcomes.append((handle, response))
        finally:
            for task in tasks:
                if not task.done():
                    task.cancel()
        return outcomes

    async def _settle(
        self,
        handle: ProviderHandle,
        address: str,
        *,
        mode: str,
    ) -> tuple[ProviderHandle, GeocodeResponse | None]:
        try:
            return handle, await self._invoke(handle, address)
        except Exception as exc:
            self._log_failure(handle, exc, mode=mode)
            return handle, None

    async def _invoke(self, handle: ProviderHandle, address: str) -> GeocodeResponse:
        started = perf_counter()
        try:
            response = await handle.geocode(address)
        except Exception:
            self._observe(handle.name, "failure", started)
            raise
        self._observe(handle.name, "success", started)
        return response

    def _observe(self, provider_name: str, outcome: str, started: float) -> None:
        if self._observer is not None:
            self._observer.observe_provider_call(provider_name, outcome, (perf_counter() - started) * 1000.0)

    @staticmethod
    def _log_failure(handle: ProviderHandle, exc: BaseException, *, mode: str) -> None:
        logger.warning(
            "provider_call_failed",
            extra={"provider": handle.name, "priority": handle.priority, "mode": mode, "error": str(exc)},
        )
