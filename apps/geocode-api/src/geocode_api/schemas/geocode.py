from __future__ import annotations

from enum import Enum

from pydantic import BaseModel

from geocode_api.repositories.execution_repository import GeocodeExecutionRecord


class GeocodeMode(str, Enum):
    FIRST = "first"
    ALL = "all"
    GROUP = "group"


def parse_priorities(raw: str | None) -> list[int]:
    priorities: list[int] = []
    for part in (raw or "").split(","):
        try:
            priorities.append(int(part.strip()))
        except ValueError:
            continue
    return priorities or [1]


class GeocodeExecutionItem(BaseModel):
    operation: str
    address: str
    succeeded: bool
    result_count: int
    duration_ms: float
    created_at: str
    trace_id: str
    error_message: str | None
    parameters: dict

    @classmethod
    def from_record(cls, record: GeocodeExecutionRecord) -> "GeocodeExecutionItem":
        return cls(
            operation=record.operation,
            address=record.address,
            succeeded=record.succeeded,
            result_count=record.result_count,
            duration_ms=record.duration_ms,
            created_at=record.created_at,
            trace_id=record.trace_id,
            error_message=record.error_message,
            parameters=dict(record.parameters),
        )
