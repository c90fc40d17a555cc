from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, Field


@dataclass(frozen=True)
class ProviderDescriptor:
    name: str
    endpoint_template: str
    api_key: str
    priority: int
    parameters: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class Coordinates:
    lat: float
    lng: float


class LatLng(BaseModel):
    lat: float
    lng: float


class Geometry(BaseModel):
    location: LatLng | None = None
    location_type: str | None = None


class AddressComponent(BaseModel):
    long_name: str = ""
    short_name: str = ""
    types: list[str] = Field(default_factory=list)


class GeocodeResult(BaseModel):
    formatted_address: str = ""
    geometry: Geometry | None = None
    place_id: str | None = None
    types: list[str] = Field(default_factory=list)
    partial_match: bool = False
    address_components: list[AddressComponent] = Field(default_factory=list)

    @property
    def coordinates(self) -> Coordinates | None:
        if self.geometry is None or self.geometry.location is None:
            return None
        return Coordinates(lat=self.geometry.location.lat, lng=self.geometry.location.lng)


class GeocodeResponse(BaseModel):
    status: str = ""
    results: list[GeocodeResult] = Field(default_factory=list)

    @property
    def is_ok(self) -> bool:
        return self.status == "OK" and bool(self.results)


class PlaceItem(BaseModel):
    place_id: str | None = None
    name: str = ""
    geometry: Geometry | None = None
    types: list[str] = Field(default_factory=list)
    vicinity: str | None = None


class PlacesResult(BaseModel):
    status: str = ""
    results: list[PlaceItem] = Field(default_factory=list)
    html_attributions: list[Any] = Field(default_factory=list)


class OpeningHours(BaseModel):
    open_now: bool | None = None
    weekday_text: list[str] = Field(default_factory=list)


class PlaceDetail(BaseModel):
    place_id: str | None = None
    name: str = ""
    geometry: Geometry | None = None
    formatted_address: str | None = None
    types: list[str] = Field(default_factory=list)
    international_phone_number: str | None = None
    opening_hours: OpeningHours | None = None


class PlaceDetailsResult(BaseModel):
    status: str = ""
    result: PlaceDetail | None = None
    html_attributions: list[Any] = Field(default_factory=list)


@dataclass
class RefinementContext:
    original_address: str
    refined_address: str
    geocode_results: list[GeocodeResponse] = field(default_factory=list)
    coordinates: Coordinates | None = None
    nearby_places: PlacesResult | None = None
    used_radius: int | None = None
    process_log: list[str] = field(default_factory=list)

    def log(self, entry: str) -> None:
        self.process_log.append(entry)

    def freeze(self) -> RefinementResult:
        return RefinementResult(
            original_address=self.original_address,
            refined_address=self.refined_address,
            geocode_results=tuple(self.geocode_results),
            coordinates=self.coordinates,
            nearby_places=self.nearby_places,
            used_radius=self.used_radius,
            process_log=tuple(self.process_log),
        )


@dataclass(frozen=True)
class RefinementResult:
    original_address: str
    refined_address: str
    geocode_results: tuple[GeocodeResponse, ...]
    coordinates: Coordinates | None
    nearby_places: PlacesResult | None
    used_radius: int | None
    process_log: tuple[str, ...]

    def to_dict(self) -> dict[str, Any]:
        return {
            "original_address": self.original_address,
            "refined_address": self.refined_address,
            "geocode_results": [item.model_dump() for item in self.geocode_results],
            "latitude": self.coordinates.lat if self.coordinates else None,
            "longitude": self.coordinates.lng if self.coordinates else None,
            "nearby_places": self.nearby_places.model_dump() if self.nearby_places else None,
            "used_radius": self.used_radius,
            "process_logs": list(self.process_log),
        }
