"""
Trip pipeline: generate an itinerary, then enrich every stop in visiting order.
"""

import logging
import time
from typing import Callable

from app.core.geo_utils import route_distance_km
from app.core.image_service import WikipediaImageLookup
from app.core.itinerary_generator import ItineraryGenerator
from app.core.geocoding import get_geocoding_provider
from app.core.llm_provider import get_llm_provider
from app.core.place_enricher import PlaceEnricher
from app.core.poi_service import get_poi_catalogs
from app.core.schemas import EnrichedPlace, EnrichedTrip, TripRequest
from app.core.settings import Settings, get_settings

logger = logging.getLogger(__name__)

INTER_CALL_DELAY_SECONDS = 1.0


class TripEnrichmentPipeline:
    """Owns one request end to end: TripRequest -> GeneratedItinerary -> EnrichedTrip."""

    def __init__(
        self,
        generator: ItineraryGenerator,
        enricher: PlaceEnricher,
        inter_call_delay: float = INTER_CALL_DELAY_SECONDS,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.generator = generator
        self.enricher = enricher
        self.inter_call_delay = inter_call_delay
        self._sleep = sleep

    def build(self, request: TripRequest) -> EnrichedTrip:
        start = time.time()
        itinerary = self.generator.generate(request)
        logger.info(
            f"Generated '{itinerary.title}' ({itinerary.source}, {len(itinerary.places)} places)"
        )

        # Sequential: the open geocoder caps request rate per client
        places: list[EnrichedPlace] = []
        for index, stub in enumerate(itinerary.places):
            if index > 0 and self.enricher.requires_throttling and self.inter_call_delay > 0:
                self._sleep(self.inter_call_delay)
            try:
                place = self.enricher.enrich(stub, request.location)
            except Exception:
                logger.exception(f"Enrichment failed for '{stub.name}', backfilling")
                place = self.enricher.backfill(stub, request.location)
            places.append(place)

        trip = EnrichedTrip.from_generated(itinerary, places, request)
        if not trip.total_distance_label:
            distance = route_distance_km((p.lat, p.lng) for p in places)
            trip = trip.model_copy(update={"total_distance_label": f"{distance:.1f} km"})

        logger.info(f"Built trip {trip.id} for {request.location} in {time.time() - start:.2f}s")
        return trip


def build_trip_pipeline(settings: Settings | None = None) -> TripEnrichmentPipeline:
    """Wire the pipeline from configuration (AI model, geocoder, catalogs)."""
    settings = settings or get_settings()
    generator = ItineraryGenerator(
        llm=get_llm_provider(settings),
        temperature=settings.ai_temperature,
        max_output_tokens=settings.ai_max_output_tokens,
    )
    enricher = PlaceEnricher(
        geocoder=get_geocoding_provider(settings),
        poi_catalogs=get_poi_catalogs(settings),
        image_lookup=WikipediaImageLookup(
            base_url=settings.wikipedia_api_url,
            user_agent=settings.http_user_agent,
        ),
    )
    return TripEnrichmentPipeline(generator, enricher)
