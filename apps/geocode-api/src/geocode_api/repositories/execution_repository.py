from __future__ import annotations

import json
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Protocol

from devkit.db import AsyncDatabaseManager
from sqlalchemy import select

from geocode_api.repositories.orm import GeocodeExecutionORM


@dataclass(frozen=True)
class GeocodeExecutionRecord:
    operation: str
    address: str
    succeeded: bool
    result_count: int
    duration_ms: float
    created_at: str
    trace_id: str = ""
    error_message: str | None = None
    parameters: dict[str, Any] = field(default_factory=dict)


class ExecutionAuditRepository(Protocol):
    async def add(self, record: GeocodeExecutionRecord) -> None: ...

    async def list_recent(self, limit: int) -> list[GeocodeExecutionRecord]: ...


class InMemoryExecutionAuditRepository(ExecutionAuditRepository):
    def __init__(self, max_records: int = 1000) -> None:
        self._records: deque[GeocodeExecutionRecord] = deque(maxlen=max_records)

    async def add(self, record: GeocodeExecutionRecord) -> None:
        self._records.append(record)

    async def list_recent(self, limit: int) -> list[GeocodeExecutionRecord]:
        return list(reversed(self._records))[:limit]


class SqlExecutionAuditRepository(ExecutionAuditRepository):
    def __init__(self, db: AsyncDatabaseManager) -> None:
        self._db = db

    async def add(self, record: GeocodeExecutionRecord) -> None:
        async def _run(session):
            session.add(
                GeocodeExecutionORM(
                    operation=record.operation,
                    address=record.address[:512],
                    parameters_json=json.dumps(record.parameters, ensure_ascii=True),
                    succeeded=record.succeeded,
                    error_message=record.error_message,
                    result_count=record.result_count,
                    duration_ms=record.duration_ms,
                    trace_id=record.trace_id,
                    created_at=record.created_at,
                )
            )

        await self._db.run_with_session(_run)

    async def list_recent(self, limit: int) -> list[GeocodeExecutionRecord]:
        async def _run(session):
            stmt = select(GeocodeExecutionORM).order_by(GeocodeExecutionORM.id.desc()).limit(limit)
            rows = (await session.scalars(stmt)).all()
            output: list[GeocodeExecutionRecord] = []
            for row in rows:
                try:
                    parameters = json.loads(row.parameters_json or "{}")
                except ValueError:
                    parameters = {}
                output.append(
                    GeocodeExecutionRecord(
                        operation=row.operation,
                        address=row.address,
                        succeeded=row.succeeded,
                        result_count=row.result_count,
                        duration_ms=row.duration_ms,
                        created_at=row.created_at,
                        trace_id=row.trace_id,
                        error_message=row.error_message,
                        parameters=parameters if isinstance(parameters, dict) else {},
                    )
                )
            return output

        return await self._db.run_with_session(_run)
