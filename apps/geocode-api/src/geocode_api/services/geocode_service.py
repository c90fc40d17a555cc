from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Collection
from time import perf_counter
from typing import Any, TypeVar

from devkit.clock import now_utc_iso
from geocoding_core.aggregator import ProviderAggregator
from geocoding_core.deadline import run_with_deadline
from geocoding_core.errors import AddressValidationError
from geocoding_core.models import GeocodeResponse, RefinementResult
from geocoding_core.orchestrator import RefinementOrchestrator

from geocode_api.observability import get_trace_id
from geocode_api.repositories.execution_repository import ExecutionAuditRepository, GeocodeExecutionRecord

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _require_address(address: str) -> str:
    if not address or not address.strip():
        raise AddressValidationError("address must not be empty")
    return address


class GeocodeService:
    def __init__(
        self,
        aggregator: ProviderAggregator,
        orchestrator: RefinementOrchestrator,
        *,
        audit: ExecutionAuditRepository | None = None,
        audit_gate: Callable[[], Awaitable[bool]] | None = None,
        timeout_seconds: float | None = None,
    ) -> None:
        self._aggregator = aggregator
        self._orchestrator = orchestrator
        self._audit = audit
        self._audit_gate = audit_gate
        self._timeout_seconds = timeout_seconds

    async def race_best(self, address: str) -> GeocodeResponse:
        _require_address(address)
        return await self._execute(
            "first",
            address,
            {},
            lambda: self._aggregator.race_best(address),
            lambda response: len(response.results),
        )

    async def all(self, address: str) -> list[GeocodeResponse]:
        _require_address(address)
        return await self._execute("all", address, {}, lambda: self._aggregator.all(address), len)

    async def grouped(self, address: str, priorities: Collection[int]) -> dict[str, list[GeocodeResponse]]:
        _require_address(address)
        return await self._execute(
            "group",
            address,
            {"priorities": sorted(set(priorities))},
            lambda: self._aggregator.grouped(address, priorities),
            lambda grouped: sum(len(items) for items in grouped.values()),
        )

    async def by_name(self, address: str, name: str) -> GeocodeResponse:
        _require_address(address)
        return await self._execute(
            "by_name",
            address,
            {"provider": name},
            lambda: self._aggregator.by_name(address, name),
            lambda response: len(response.results),
        )

    async def refine(self, address: str, radius: int) -> RefinementResult:
        _require_address(address)
        return await self._execute(
            "refined",
            address,
            {"radius": radius},
            lambda: self._orchestrator.run(address, radius),
            lambda result: len(result.geocode_results),
        )

    async def recent_executions(self, limit: int) -> list[GeocodeExecutionRecord]:
        if self._audit is None:
            return []
        return await self._audit.list_recent(limit)

    async def _execute(
        self,
        operation: str,
        address: str,
        parameters: dict[str, Any],
        action: Callable[[], Awaitable[T]],
        count: Callable[[T], int],
    ) -> T:
        started = perf_counter()
        try:
            result = await run_with_deadline(action(), self._timeout_seconds)
        except Exception as exc:
            await self._record(operation, address, parameters, started, succeeded=False, error=exc)
            raise
        await self._record(operation, address, parameters, started, succeeded=True, result_count=count(result))
        return result

    async def _record(
        self,
        operation: str,
        address: str,
        parameters: dict[str, Any],
        started: float,
        *,
        succeeded: bool,
        result_count: int = 0,
        error: Exception | None = None,
    ) -> None:
        if self._audit is None:
            return
        record = GeocodeExecutionRecord(
            operation=operation,
            address=address,
            succeeded=succeeded,
            result_count=result_count,
            duration_ms=(perf_counter() - started) * 1000.0,
            created_at=now_utc_iso(),
            trace_id=get_trace_id(),
            error_message=str(error) if error is not None else None,
            parameters=parameters,
        )
        try:
            if self._audit_gate is not None and not await self._audit_gate():
                return
            await self._audit.add(record)
        except Exception:
            logger.exception("geocode_execution_record_failed", extra={"operation": operation})
            return
        logger.debug(
            "geocode_execution_recorded",
            extra={"operation": operation, "succeeded": succeeded, "trace_id": record.trace_id},
        )
