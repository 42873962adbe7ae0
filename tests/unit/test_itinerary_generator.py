import json

import pytest

from app.core.errors import ParseError, TransportError
from app.core.itinerary_generator import (
    COST_RANGE_LABELS,
    ItineraryGenerator,
    build_prompt,
    extract_json_object,
    parse_itinerary_response,
    strip_code_fences,
)
from app.core.schemas import TripRequest


class FakeLLM:
    model = "fake:model"

    def __init__(self, response: str = "", error: Exception | None = None) -> None:
        self.response = response
        self.error = error
        self.calls: list[dict] = []

    def chat(self, messages, temperature=1.0, max_tokens=None):
        self.calls.append(
            {"messages": messages, "temperature": temperature, "max_tokens": max_tokens}
        )
        if self.error:
            raise self.error
        return self.response


def _place(name: str, **extra) -> dict:
    place = {
        "name": name,
        "type": "Museum",
        "time": "10:00 AM",
        "duration": "2 hours",
        "description": f"Visit {name}",
        "cost": "$10-20",
        "address": "Somewhere",
        "tips": "Go early",
    }
    place.update(extra)
    return place


def _ai_payload(count: int = 4) -> dict:
    return {
        "title": "Lisbon Fun Day",
        "description": "A lively day around Lisbon.",
        "itinerary": [_place(f"Place {i}") for i in range(count)],
        "totalDistance": "6 km",
        "estimatedCost": "$60-90",
        "bestTimeToStart": "9:30 AM",
        "transportationTips": "Use the trams",
        "weatherConsiderations": "Bring sunscreen",
        "additionalTips": "Wear comfy shoes",
    }


def _request(**overrides) -> TripRequest:
    data = {"mood": "fun", "location": "Lisbon", "duration_hours": 6, "budget_tier": 2}
    data.update(overrides)
    return TripRequest(**data)


def test_strip_code_fences():
    text = '```json\n{"a": 1}\n```'
    assert strip_code_fences(text) == '{"a": 1}'


def test_extract_json_object_ignores_braces_in_strings_and_prose():
    text = 'Here you go: {"title": "A {curly} day", "n": {"x": 1}} hope it helps }'
    assert json.loads(extract_json_object(text)) == {"title": "A {curly} day", "n": {"x": 1}}


def test_extract_json_object_none_without_object():
    assert extract_json_object("no json here") is None


def test_parse_fenced_response_with_prose():
    raw = "Sure!\n```json\n" + json.dumps(_ai_payload()) + "\n```\nEnjoy your trip."
    body = parse_itinerary_response(raw)
    assert body["title"] == "Lisbon Fun Day"
    assert len(body["places"]) == 4
    assert body["places"][0]["duration_label"] == "2 hours"
    assert body["places"][0]["cost_label"] == "$10-20"
    assert body["total_distance_label"] == "6 km"
    assert body["weather_notes"] == "Bring sunscreen"


def test_parse_stringifies_numeric_values():
    payload = _ai_payload()
    payload["itinerary"][0]["cost"] = 20
    body = parse_itinerary_response(json.dumps(payload))
    assert body["places"][0]["cost_label"] == "20"


def test_parse_truncates_long_itinerary():
    body = parse_itinerary_response(json.dumps(_ai_payload(count=8)))
    assert len(body["places"]) == 6
    assert body["places"][-1]["name"] == "Place 5"


def test_parse_rejects_short_itinerary():
    with pytest.raises(ParseError):
        parse_itinerary_response(json.dumps(_ai_payload(count=3)))


def test_parse_skips_invalid_places():
    payload = _ai_payload(count=5)
    payload["itinerary"][1] = {"type": "no name"}
    payload["itinerary"].append("not a dict")
    body = parse_itinerary_response(json.dumps(payload))
    assert [p["name"] for p in body["places"]] == ["Place 0", "Place 2", "Place 3", "Place 4"]


def test_parse_requires_title():
    payload = _ai_payload()
    payload["title"] = "  "
    with pytest.raises(ParseError):
        parse_itinerary_response(json.dumps(payload))


def test_parse_rejects_invalid_json():
    with pytest.raises(ParseError):
        parse_itinerary_response('{"title": "x", "itinerary": [}')


def test_prompt_includes_request_details():
    request = _request(preferences={"shopping", "foodie"}, custom_prompt="  wheelchair access  ")
    prompt = build_prompt(request)
    assert "6-hour day trip itinerary for Lisbon" in prompt
    assert "moderate ($$)" in prompt
    assert prompt.index("local cuisine") < prompt.index("local markets")
    assert "Special requests from the traveler: wheelchair access" in prompt


def test_generate_with_ai():
    llm = FakeLLM(response=json.dumps(_ai_payload(count=5)))
    generator = ItineraryGenerator(llm, temperature=0.3, max_output_tokens=1000)
    request = _request(preferences={"cultural"})

    itinerary = generator.generate(request)

    assert itinerary.source == "ai"
    assert itinerary.id.startswith("trip_")
    assert len(itinerary.places) == 5
    assert itinerary.mood == "fun"
    assert itinerary.location == "Lisbon"
    assert itinerary.preferences == ["cultural"]
    assert itinerary.estimated_cost_label == "$60-90"
    assert llm.calls[0]["temperature"] == 0.3
    assert llm.calls[0]["max_tokens"] == 1000


def test_generate_defaults_cost_label_to_budget_tier():
    payload = _ai_payload()
    del payload["estimatedCost"]
    generator = ItineraryGenerator(FakeLLM(response=json.dumps(payload)))
    itinerary = generator.generate(_request(budget_tier=4))
    assert itinerary.estimated_cost_label == COST_RANGE_LABELS[4]


def test_generate_without_llm_uses_mock_for_chill_paris():
    generator = ItineraryGenerator(llm=None)
    itinerary = generator.generate(_request(mood="chill", location="Paris"))

    assert itinerary.source == "mock"
    assert itinerary.title == "Peaceful Relaxation Day in Paris"
    assert len(itinerary.places) == 4
    assert itinerary.places[0].name == "Botanical Garden"
    assert itinerary.description


@pytest.mark.parametrize(
    "llm",
    [
        FakeLLM(error=TransportError("timeout")),
        FakeLLM(response="I cannot help with that."),
        FakeLLM(response=json.dumps(_ai_payload(count=2))),
    ],
)
def test_generate_falls_back_to_mock(llm):
    itinerary = ItineraryGenerator(llm).generate(_request())
    assert itinerary.source == "mock"
    assert itinerary.title == "Epic Adventure Day in Lisbon"
    assert 4 <= len(itinerary.places) <= 6


def test_unknown_mood_uses_fun_template():
    request = _request(mood="  Sleepy ")
    assert request.mood == "sleepy"
    itinerary = ItineraryGenerator(llm=None).generate(request)
    assert itinerary.title.startswith("Epic Adventure Day")
    assert itinerary.mood == "sleepy"
