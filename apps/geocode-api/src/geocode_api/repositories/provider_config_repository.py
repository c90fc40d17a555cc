from __future__ import annotations

import json
from dataclasses import dataclass, field, replace
from typing import Protocol

from devkit.clock import now_utc_iso
from devkit.db import AsyncDatabaseManager
from geocoding_core.models import ProviderDescriptor
from sqlalchemy import func, select

from geocode_api.repositories.orm import ProviderConfigORM


@dataclass(frozen=True)
class ProviderConfigRecord:
    id: int
    name: str
    endpoint: str
    api_key: str
    priority: int
    created_at: str
    created_by: str
    endpoint_parameters: dict[str, str] = field(default_factory=dict)
    updated_at: str | None = None
    updated_by: str | None = None

    def to_descriptor(self) -> ProviderDescriptor:
        return ProviderDescriptor(
            name=self.name,
            endpoint_template=self.endpoint,
            api_key=self.api_key,
            priority=self.priority,
            parameters=dict(self.endpoint_parameters),
        )


@dataclass(frozen=True)
class ProviderConfigDraft:
    name: str
    endpoint: str
    api_key: str
    priority: int
    endpoint_parameters: dict[str, str] = field(default_factory=dict)


class ProviderConfigRepository(Protocol):
    async def list_all(self) -> list[ProviderConfigRecord]: ...

    async def get(self, config_id: int) -> ProviderConfigRecord | None: ...

    async def find_by_name(self, name: str) -> ProviderConfigRecord | None: ...

    async def create(self, draft: ProviderConfigDraft, *, actor: str) -> ProviderConfigRecord: ...

    async def update(self, config_id: int, draft: ProviderConfigDraft, *, actor: str) -> ProviderConfigRecord | None: ...

    async def delete(self, config_id: int) -> bool: ...


class InMemoryProviderConfigRepository(ProviderConfigRepository):
    def __init__(self) -> None:
        self._rows: dict[int, ProviderConfigRecord] = {}
        self._next_id = 1

    async def list_all(self) -> list[ProviderConfigRecord]:
        return sorted(self._rows.values(), key=lambda row: (row.priority, row.id))

    async def get(self, config_id: int) -> ProviderConfigRecord | None:
        return self._rows.get(config_id)

    async def find_by_name(self, name: str) -> ProviderConfigRecord | None:
        wanted = name.strip().lower()
        for row in self._rows.values():
            if row.name.lower() == wanted:
                return row
        return None

    async def create(self, draft: ProviderConfigDraft, *, actor: str) -> ProviderConfigRecord:
        record = ProviderConfigRecord(
            id=self._next_id,
            name=draft.name,
            endpoint=draft.endpoint,
            api_key=draft.api_key,
            priority=draft.priority,
            endpoint_parameters=dict(draft.endpoint_parameters),
            created_at=now_utc_iso(),
            created_by=actor,
        )
        self._rows[record.id] = record
        self._next_id += 1
        return record

    async def update(self, config_id: int, draft: ProviderConfigDraft, *, actor: str) -> ProviderConfigRecord | None:
        current = self._rows.get(config_id)
        if current is None:
            return None
        updated = replace(
            current,
            name=draft.name,
            endpoint=draft.endpoint,
            api_key=draft.api_key,
            priority=draft.priority,
            endpoint_parameters=dict(draft.endpoint_parameters),
            updated_at=now_utc_iso(),
            updated_by=actor,
        )
        self._rows[config_id] = updated
        return updated

    async def delete(self, config_id: int) -> bool:
        return self._rows.pop(config_id, None) is not None


def _to_record(row: ProviderConfigORM) -> ProviderConfigRecord:
    try:
        parameters = json.loads(row.endpoint_parameters_json or "{}")
    except ValueError:
        parameters = {}
    return ProviderConfigRecord(
        id=row.id,
        name=row.name,
        endpoint=row.endpoint,
        api_key=row.api_key,
        priority=row.priority,
        endpoint_parameters={str(k): str(v) for k, v in parameters.items()} if isinstance(parameters, dict) else {},
        created_at=row.created_at,
        created_by=row.created_by,
        updated_at=row.updated_at,
        updated_by=row.updated_by,
    )


class SqlProviderConfigRepository(ProviderConfigRepository):
    def __init__(self, db: AsyncDatabaseManager) -> None:
        self._db = db

    async def list_all(self) -> list[ProviderConfigRecord]:
        async def _run(session):
            stmt = select(ProviderConfigORM).order_by(ProviderConfigORM.priority, ProviderConfigORM.id)
            rows = (await session.scalars(stmt)).all()
            return [_to_record(row) for row in rows]

        return await self._db.run_with_session(_run)

    async def get(self, config_id: int) -> ProviderConfigRecord | None:
        async def _run(session):
            row = await session.get(ProviderConfigORM, config_id)
            return _to_record(row) if row is not None else None

        return await self._db.run_with_session(_run)

    async def find_by_name(self, name: str) -> ProviderConfigRecord | None:
        async def _run(session):
            stmt = select(ProviderConfigORM).where(func.lower(ProviderConfigORM.name) == name.strip().lower())
            row = (await session.scalars(stmt)).first()
            return _to_record(row) if row is not None else None

        return await self._db.run_with_session(_run)

    async def create(self, draft: ProviderConfigDraft, *, actor: str) -> ProviderConfigRecord:
        async def _run(session):
            row = ProviderConfigORM(
                name=draft.name,
                endpoint=draft.endpoint,
                api_key=draft.api_key,
                priority=draft.priority,
                endpoint_parameters_json=json.dumps(draft.endpoint_parameters, ensure_ascii=True),
                created_at=now_utc_iso(),
                created_by=actor,
            )
            session.add(row)
            await session.flush()
            return _to_record(row)

        return await self._db.run_with_session(_run)

    async def update(self, config_id: int, draft: ProviderConfigDraft, *, actor: str) -> ProviderConfigRecord | None:
        async def _run(session):
            row = await session.get(ProviderConfigORM, config_id)
            if row is None:
                return None
            row.name = draft.name
            row.endpoint = draft.endpoint
            row.api_key = draft.api_key
            row.priority = draft.priority
            row.endpoint_parameters_json = json.dumps(draft.endpoint_parameters, ensure_ascii=True)
            row.updated_at = now_utc_iso()
            row.updated_by = actor
            await session.flush()
            return _to_record(row)

        return await self._db.run_with_session(_run)

    async def delete(self, config_id: int) -> bool:
        async def _run(session):
            row = await session.get(ProviderConfigORM, config_id)
            if row is None:
                return False
            await session.delete(row)
            return True

        return await self._db.run_with_session(_run)
