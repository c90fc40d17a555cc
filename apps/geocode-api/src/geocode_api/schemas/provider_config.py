from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

from geocode_api.repositories.provider_config_repository import ProviderConfigDraft, ProviderConfigRecord


class ProviderConfigRequest(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    endpoint: str = Field(min_length=1, max_length=2048)
    api_key: str = Field(default="", max_length=512)
    endpoint_parameters: dict[str, str] = Field(default_factory=dict)
    priority: int = Field(default=1)
    actor: str = Field(default="system", min_length=1, max_length=128)

    @field_validator("name")
    @classmethod
    def strip_name(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("name must not be blank")
        return stripped

    @field_validator("endpoint")
    @classmethod
    def validate_endpoint(cls, value: str) -> str:
        if not value.startswith(("http://", "https://")):
            raise ValueError("endpoint must be an http(s) URL template")
        return value

    def to_draft(self) -> ProviderConfigDraft:
        return ProviderConfigDraft(
            name=self.name,
            endpoint=self.endpoint,
            api_key=self.api_key,
            priority=self.priority,
            endpoint_parameters=dict(self.endpoint_parameters),
        )


class ProviderConfigItem(BaseModel):
    id: int
    name: str
    endpoint: str
    api_key: str
    endpoint_parameters: dict[str, str]
    priority: int
    created_at: str
    created_by: str
    updated_at: str | None = None
    updated_by: str | None = None

    @classmethod
    def from_record(cls, record: ProviderConfigRecord) -> "ProviderConfigItem":
        return cls(
            id=record.id,
            name=record.name,
            endpoint=record.endpoint,
            api_key=record.api_key,
            endpoint_parameters=dict(record.endpoint_parameters),
            priority=record.priority,
            created_at=record.created_at,
            created_by=record.created_by,
            updated_at=record.updated_at,
            updated_by=record.updated_by,
        )
