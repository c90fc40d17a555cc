from __future__ import annotations

from pydantic import BaseModel, Field

from geocode_api.repositories.parameter_repository import ParameterRecord


class ParameterCreateRequest(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    value: str = Field(max_length=4000)
    description: str | None = Field(default=None, max_length=512)
    category: str = Field(default="general", min_length=1, max_length=64)


class ParameterUpdateRequest(BaseModel):
    value: str = Field(max_length=4000)
    description: str | None = Field(default=None, max_length=512)
    category: str | None = Field(default=None, min_length=1, max_length=64)


class ParameterItem(BaseModel):
    id: int
    name: str
    value: str
    description: str | None
    category: str
    created_at: str
    updated_at: str | None

    @classmethod
    def from_record(cls, record: ParameterRecord) -> "ParameterItem":
        return cls(
            id=record.id,
            name=record.name,
            value=record.value,
            description=record.description,
            category=record.category,
            created_at=record.created_at,
            updated_at=record.updated_at,
        )
