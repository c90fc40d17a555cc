from __future__ import annotations

import logging
from enum import Enum

from geocoding_core.aggregator import ProviderAggregator
from geocoding_core.errors import AddressValidationError
from geocoding_core.models import Coordinates, GeocodeResponse, RefinementContext, RefinementResult
from geocoding_core.ports import AddressRefiner, NearbyPlacesSearch

logger = logging.getLogger(__name__)


class RefinementStage(str, Enum):
    START = "start"
    AI_REFINE = "ai_refine"
    GEOCODE = "geocode"
    PLACES = "places"
    DONE = "done"


def _describe(exc: BaseException) -> str:
    return str(exc) or type(exc).__name__


def extract_coordinates(responses: list[GeocodeResponse]) -> Coordinates | None:
    """Coordinates of the first result of the first usable response, if any."""
    for response in responses:
        if response.is_ok:
            return response.results[0].coordinates
    return None


class RefinementOrchestrator:
    """Runs the AI refine, geocode and nearby places stages for one address.

    Only the geocode stage can fail the request. The other two record why they were
    skipped in the process log and let the pipeline continue.
    """

    def __init__(
        self,
        aggregator: ProviderAggregator,
        refiner: AddressRefiner,
        places: NearbyPlacesSearch,
    ) -> None:
        self._aggregator = aggregator
        self._refiner = refiner
        self._places = places

    async def run(self, address: str, radius: int = 0) -> RefinementResult:
        context = self._start(address)
        await self._refine(context)
        await self._geocode(context)
        await self._search_places(context, radius)
        self._enter(RefinementStage.DONE, context)
        return context.freeze()

    def _start(self, address: str) -> RefinementContext:
        if not address or not address.strip():
            raise AddressValidationError("address must not be empty")
        context = RefinementContext(original_address=address, refined_address=address)
        self._enter(RefinementStage.START, context)
        return context

    async def _refine(self, context: RefinementContext) -> None:
        self._enter(RefinementStage.AI_REFINE, context)
        try:
            refined = await self._refiner.refine(context.original_address)
        except Exception as exc:
            self._skip(context, RefinementStage.AI_REFINE, f"IA skipped: {_describe(exc)}")
            return

        if not refined or not refined.strip():
            self._skip(context, RefinementStage.AI_REFINE, "IA skipped: empty refinement")
            return
        if refined == context.original_address:
            context.log("IA returned unchanged address")
            return
        context.refined_address = refined
        context.log("IA refined successfully")

    async def _geocode(self, context: RefinementContext) -> None:
        self._enter(RefinementStage.GEOCODE, context)
        context.geocode_results = await self._aggregator.all(context.refined_address)
        context.log("Geocode completed")
        context.coordinates = extract_coordinates(context.geocode_results)

    async def _search_places(self, context: RefinementContext, radius: int) -> None:
        self._enter(RefinementStage.PLACES, context)
        coordinates = context.coordinates
        unmet: list[str] = []
        if coordinates is None:
            unmet.append("no coordinates available")
        if radius <= 0:
            unmet.append("radius must be greater than 0")
        if unmet or coordinates is None:
            self._skip(context, RefinementStage.PLACES, f"Places skipped: {'; '.join(unmet)}")
            return

        try:
            nearby = await self._places.search_nearby(coordinates.lat, coordinates.lng, radius)
        except Exception as exc:
            self._skip(context, RefinementStage.PLACES, f"Places skipped: {_describe(exc)}")
            return
        context.nearby_places = nearby
        context.used_radius = radius
        context.log("Places completed")

    @staticmethod
    def _enter(stage: RefinementStage, context: RefinementContext) -> None:
        logger.debug("refinement_stage_entered", extra={"stage": stage.value, "address": context.original_address})

    @staticmethod
    def _skip(context: RefinementContext, stage: RefinementStage, entry: str) -> None:
        context.log(entry)
        logger.info("refinement_stage_skipped", extra={"stage": stage.value, "reason": entry})
