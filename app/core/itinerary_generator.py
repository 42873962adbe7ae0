"""
AI itinerary generation with a canned, mood-keyed fallback.
"""

import json
import logging
import re
import uuid
from datetime import datetime, timezone
from typing import Any

from pydantic import ValidationError

from app.core.errors import ConfigurationMissingError, ParseError, TransportError
from app.core.llm_provider import LLMProvider
from app.core.mock_itineraries import get_mock_itinerary
from app.core.schemas import GeneratedItinerary, PlaceStub, TripRequest

logger = logging.getLogger(__name__)

MIN_PLACES = 4
MAX_PLACES = 6

# Budget tier (0-4) labels: one set for the prompt, one for display
BUDGET_PROMPT_LABELS = [
    "free activities",
    "budget-friendly ($)",
    "moderate ($$)",
    "premium ($$$)",
    "luxury ($$$$)",
]
COST_RANGE_LABELS = [
    "Free – low",
    "Low ($10 – $30)",
    "Moderate ($30 – $75)",
    "Premium ($75 – $150)",
    "Premium+ ($150+)",
]

MOOD_DESCRIPTIONS = {
    "fun": "exciting, adventurous, and energetic activities with entertainment and thrills",
    "chill": "relaxing, peaceful, and laid-back experiences with calm environments",
    "nature": "outdoor activities, parks, gardens, hiking trails, and natural attractions",
    "romantic": "intimate, romantic, and special couple-friendly spots with ambiance",
}

PREFERENCE_INSTRUCTIONS = {
    "foodie": "Focus on food experiences and local cuisine.",
    "cultural": "Include cultural attractions, museums, and historical sites.",
    "shopping": "Include shopping opportunities and local markets.",
}

# AI response keys mapped onto itinerary fields
TRIP_NOTE_KEYS = {
    "total_distance_label": ("totalDistance", "total_distance", "total_distance_label"),
    "estimated_cost_label": ("estimatedCost", "estimated_cost", "estimated_cost_label"),
    "best_time_to_start": ("bestTimeToStart", "best_time_to_start"),
    "transportation_tips": ("transportationTips", "transportation_tips"),
    "weather_notes": ("weatherConsiderations", "weatherNotes", "weather_notes"),
    "additional_tips": ("additionalTips", "additional_tips"),
}


def budget_label(tier: int) -> str:
    return COST_RANGE_LABELS[tier] if 0 <= tier < len(COST_RANGE_LABELS) else COST_RANGE_LABELS[2]


def build_prompt(request: TripRequest) -> str:
    """Build the user prompt for a trip request."""
    mood = request.mood
    location = request.location
    duration = request.duration_hours
    budget_text = BUDGET_PROMPT_LABELS[request.budget_tier]
    mood_text = MOOD_DESCRIPTIONS.get(mood, mood)

    preferences_text = " ".join(
        PREFERENCE_INSTRUCTIONS[p] for p in sorted(request.preferences)
    ) or "None specified"

    custom_text = ""
    if request.custom_prompt and request.custom_prompt.strip():
        custom_text = f"- Special requests from the traveler: {request.custom_prompt.strip()}\n"

    return (
        f"You are a professional travel planner creating a detailed {duration}-hour day trip "
        f"itinerary for {location}.\n\n"
        "TRIP REQUIREMENTS:\n"
        f"- Mood: {mood} ({mood_text})\n"
        f"- Duration: {duration} hours\n"
        f"- Budget: {budget_text}\n"
        f"- Location: {location}\n"
        f"- Additional preferences: {preferences_text}\n"
        f"{custom_text}\n"
        f"Please create a realistic, well-timed itinerary with actual places in {location}. "
        "Respond with ONLY a valid JSON object in this exact format:\n\n"
        "{\n"
        f'  "title": "Engaging trip title that captures the {mood} mood",\n'
        '  "description": "2-3 sentence description of what makes this trip special",\n'
        '  "itinerary": [\n'
        "    {\n"
        f'      "name": "Actual place name in {location}",\n'
        '      "type": "Category (Restaurant, Park, Museum, Gallery, Market, etc.)",\n'
        '      "time": "Start time (e.g., 10:00 AM)",\n'
        '      "duration": "Time to spend (e.g., 2 hours)",\n'
        f'      "description": "What to do there and why it fits the {mood} mood",\n'
        '      "cost": "Price range (Free, $5-15, $15-30, etc.)",\n'
        '      "address": "Full street address if known, or general area",\n'
        '      "tips": "Helpful insider tip or practical advice"\n'
        "    }\n"
        "  ],\n"
        '  "totalDistance": "Estimated walking/driving distance in km",\n'
        '  "estimatedCost": "Total cost range for the day",\n'
        '  "bestTimeToStart": "Recommended start time",\n'
        '  "transportationTips": "How to get around efficiently",\n'
        '  "weatherConsiderations": "Weather-related advice",\n'
        '  "additionalTips": "Extra helpful advice for the trip"\n'
        "}\n\n"
        "IMPORTANT GUIDELINES:\n"
        f"1. Include {MIN_PLACES}-{MAX_PLACES} specific, real places in {location}\n"
        "2. Create logical timing with travel time between locations\n"
        f"3. Match the {mood} mood throughout all activities\n"
        f"4. Stay within the {budget_text} budget range\n"
        "5. Include at least one meal/food recommendation\n"
        f"6. Make sure the total duration matches {duration} hours\n"
        "7. Consider opening hours and typical visit durations\n\n"
        "Return ONLY the JSON object, no additional text or formatting."
    )


def strip_code_fences(text: str) -> str:
    """Remove markdown code fences (```json ... ```) wherever they appear."""
    return re.sub(r"```(?:json|JSON)?[ \t]*\n?", "", text).strip()


def extract_json_object(text: str) -> str | None:
    """
    Return the first balanced {...} substring of text.

    Braces inside JSON string literals are ignored, so prose before or after
    the object (and braces inside descriptions) do not break extraction.
    """
    start = text.find("{")
    if start == -1:
        return None

    depth = 0
    in_string = False
    escaped = False
    for i in range(start, len(text)):
        ch = text[i]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue

        if ch == '"':
            in_string = True
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return text[start : i + 1]
    return None


def parse_itinerary_response(raw_text: str) -> dict[str, Any]:
    """
    Parse LLM output into an itinerary body (title, description, places, notes).

    Raises:
        ParseError: if no JSON object can be extracted or it fails validation
    """
    candidate = extract_json_object(strip_code_fences(raw_text or ""))
    if candidate is None:
        raise ParseError("No JSON object found in AI response")

    try:
        data = json.loads(candidate)
    except json.JSONDecodeError as e:
        raise ParseError(f"Invalid JSON in AI response: {e}") from e

    title = data.get("title")
    if not isinstance(title, str) or not title.strip():
        raise ParseError("AI response has no title")

    raw_places = data.get("itinerary", data.get("places"))
    if not isinstance(raw_places, list):
        raise ParseError("AI response has no itinerary list")

    places = []
    for raw_place in raw_places:
        if not isinstance(raw_place, dict):
            continue
        try:
            places.append(PlaceStub.model_validate(_stringify_values(raw_place)))
        except ValidationError as e:
            logger.debug(f"Skipping invalid place in AI response: {e}")

    if len(places) < MIN_PLACES:
        raise ParseError(f"AI response has {len(places)} usable places, need {MIN_PLACES}")
    if len(places) > MAX_PLACES:
        logger.info(f"Truncating AI itinerary from {len(places)} to {MAX_PLACES} places")
        places = places[:MAX_PLACES]

    body: dict[str, Any] = {
        "title": title.strip(),
        "description": str(data.get("description") or "").strip(),
        "places": [p.model_dump() for p in places],
    }
    for field, keys in TRIP_NOTE_KEYS.items():
        value = next((data[k] for k in keys if data.get(k)), "")
        body[field] = str(value).strip()
    return body


def _stringify_values(raw: dict[str, Any]) -> dict[str, Any]:
    # Models sometimes return numbers for cost or duration
    return {k: (str(v) if isinstance(v, (int, float)) else v) for k, v in raw.items()}


class ItineraryGenerator:
    """Generates a structured itinerary; never raises for provider failures."""

    def __init__(
        self,
        llm: LLMProvider | None,
        temperature: float = 0.7,
        max_output_tokens: int = 2048,
    ) -> None:
        self.llm = llm
        self.temperature = temperature
        self.max_output_tokens = max_output_tokens

    def generate(self, request: TripRequest) -> GeneratedItinerary:
        try:
            body = self._generate_with_ai(request)
            return self._stamp(body, request, source="ai")
        except ConfigurationMissingError as e:
            logger.info(f"Using mock itinerary for {request.location}: {e}")
        except TransportError as e:
            logger.warning(f"AI request failed, using mock itinerary: {e}")
        except (ParseError, ValidationError) as e:
            logger.warning(f"Could not parse AI itinerary, using mock itinerary: {e}")

        body = get_mock_itinerary(request.mood, request.location)
        return self._stamp(body, request, source="mock")

    def _generate_with_ai(self, request: TripRequest) -> dict[str, Any]:
        if self.llm is None:
            raise ConfigurationMissingError("No AI backend credential configured")

        messages = [
            {
                "role": "system",
                "content": "You are a travel planning assistant that replies with JSON only.",
            },
            {"role": "user", "content": build_prompt(request)},
        ]
        logger.debug(
            f"Requesting itinerary: model={self.llm.model} mood={request.mood} "
            f"location={request.location} hours={request.duration_hours}"
        )
        raw_text = self.llm.chat(
            messages,
            temperature=self.temperature,
            max_tokens=self.max_output_tokens,
        )
        try:
            return parse_itinerary_response(raw_text)
        except ParseError:
            logger.debug(f"Raw AI response: {raw_text[:500]}")
            raise

    @staticmethod
    def _stamp(body: dict[str, Any], request: TripRequest, source: str) -> GeneratedItinerary:
        return GeneratedItinerary(
            id=f"trip_{uuid.uuid4().hex[:12]}",
            created_at=datetime.now(timezone.utc),
            title=body["title"],
            description=body.get("description")
            or f"A {request.mood} day in {request.location}.",
            places=body["places"],
            total_distance_label=body.get("total_distance_label", ""),
            estimated_cost_label=body.get("estimated_cost_label")
            or budget_label(request.budget_tier),
            best_time_to_start=body.get("best_time_to_start", ""),
            transportation_tips=body.get("transportation_tips", ""),
            weather_notes=body.get("weather_notes", ""),
            additional_tips=body.get("additional_tips", ""),
            mood=request.mood,
            location=request.location,
            duration_hours=request.duration_hours,
            budget_tier=request.budget_tier,
            preferences=sorted(request.preferences),
            source=source,
        )
