from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Protocol

from devkit.clock import now_utc_iso
from devkit.db import AsyncDatabaseManager
from sqlalchemy import func, select

from geocode_api.repositories.orm import ParameterORM


@dataclass(frozen=True)
class ParameterRecord:
    id: int
    name: str
    value: str
    category: str
    created_at: str
    description: str | None = None
    updated_at: str | None = None


class ParameterRepository(Protocol):
    async def list_all(self) -> list[ParameterRecord]: ...

    async def get(self, parameter_id: int) -> ParameterRecord | None: ...

    async def find_by_name(self, name: str) -> ParameterRecord | None: ...

    async def create(self, *, name: str, value: str, description: str | None, category: str) -> ParameterRecord: ...

    async def update(
        self,
        parameter_id: int,
        *,
        value: str,
        description: str | None,
        category: str,
    ) -> ParameterRecord | None: ...


class InMemoryParameterRepository(ParameterRepository):
    def __init__(self) -> None:
        self._rows: dict[int, ParameterRecord] = {}
        self._next_id = 1

    async def list_all(self) -> list[ParameterRecord]:
        return sorted(self._rows.values(), key=lambda row: (row.category, row.name))

    async def get(self, parameter_id: int) -> ParameterRecord | None:
        return self._rows.get(parameter_id)

    async def find_by_name(self, name: str) -> ParameterRecord | None:
        wanted = name.strip().lower()
        for row in self._rows.values():
            if row.name.lower() == wanted:
                return row
        return None

    async def create(self, *, name: str, value: str, description: str | None, category: str) -> ParameterRecord:
        record = ParameterRecord(
            id=self._next_id,
            name=name,
            value=value,
            description=description,
            category=category,
            created_at=now_utc_iso(),
        )
        self._rows[record.id] = record
        self._next_id += 1
        return record

    async def update(
        self,
        parameter_id: int,
        *,
        value: str,
        description: str | None,
        category: str,
    ) -> ParameterRecord | None:
        current = self._rows.get(parameter_id)
        if current is None:
            return None
        updated = replace(current, value=value, description=description, category=category, updated_at=now_utc_iso())
        self._rows[parameter_id] = updated
        return updated


def _to_record(row: ParameterORM) -> ParameterRecord:
    return ParameterRecord(
        id=row.id,
        name=row.name,
        value=row.value,
        description=row.description,
        category=row.category,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


class SqlParameterRepository(ParameterRepository):
    def __init__(self, db: AsyncDatabaseManager) -> None:
        self._db = db

    async def list_all(self) -> list[ParameterRecord]:
        async def _run(session):
            rows = (await session.scalars(select(ParameterORM).order_by(ParameterORM.category, ParameterORM.name))).all()
            return [_to_record(row) for row in rows]

        return await self._db.run_with_session(_run)

    async def get(self, parameter_id: int) -> ParameterRecord | None:
        async def _run(session):
            row = await session.get(ParameterORM, parameter_id)
            return _to_record(row) if row is not None else None

        return await self._db.run_with_session(_run)

    async def find_by_name(self, name: str) -> ParameterRecord | None:
        async def _run(session):
            stmt = select(ParameterORM).where(func.lower(ParameterORM.name) == name.strip().lower())
            row = (await session.scalars(stmt)).first()
            return _to_record(row) if row is not None else None

        return await self._db.run_with_session(_run)

    async def create(self, *, name: str, value: str, description: str | None, category: str) -> ParameterRecord:
        async def _run(session):
            row = ParameterORM(
                name=name,
                value=value,
                description=description,
                category=category,
                created_at=now_utc_iso(),
            )
            session.add(row)
            await session.flush()
            return _to_record(row)

        return await self._db.run_with_session(_run)

    async def update(
        self,
        parameter_id: int,
        *,
        value: str,
        description: str | None,
        category: str,
    ) -> ParameterRecord | None:
        async def _run(session):
            row = await session.get(ParameterORM, parameter_id)
            if row is None:
                return None
            row.value = value
            row.description = description
            row.category = category
            row.updated_at = now_utc_iso()
            await session.flush()
            return _to_record(row)

        return await self._db.run_with_session(_run)
