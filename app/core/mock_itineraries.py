"""
Hand-authored, mood-keyed itineraries used when AI generation is unavailable.
"""

from typing import Any

DEFAULT_MOOD = "fun"

MOOD_TITLES = {
    "fun": "Epic Adventure Day",
    "chill": "Peaceful Relaxation Day",
    "nature": "Nature Explorer Day",
    "romantic": "Romantic Escape Day",
}

MOOD_PLACES: dict[str, list[dict[str, Any]]] = {
    "fun": [
        {
            "name": "Adventure Park",
            "type": "Entertainment",
            "time": "10:00 AM",
            "duration_label": "2.5 hours",
            "description": (
                "Start your day with thrilling rides and exciting activities that will get "
                "your adrenaline pumping. Perfect for adventure seekers looking for high-energy fun."
            ),
            "cost_label": "$25-35",
            "address": "123 Adventure Blvd",
            "tips": "Arrive early to avoid crowds and get the best ride times",
        },
        {
            "name": "Local Food Market",
            "type": "Food & Dining",
            "time": "1:00 PM",
            "duration_label": "1.5 hours",
            "description": (
                "Explore a vibrant market filled with diverse food vendors and local "
                "specialties. Great for trying new flavors and experiencing local culture."
            ),
            "cost_label": "$15-25",
            "address": "456 Market Street",
            "tips": "Try the local street food specialties and bring cash for smaller vendors",
        },
        {
            "name": "Interactive Museum",
            "type": "Museum",
            "time": "3:30 PM",
            "duration_label": "2 hours",
            "description": (
                "Engage with hands-on exhibits and interactive displays that make learning "
                "fun and exciting. Perfect for curious minds and group activities."
            ),
            "cost_label": "$12-18",
            "address": "789 Museum Ave",
            "tips": "Check for special exhibitions and interactive workshops",
        },
        {
            "name": "Rooftop Bar",
            "type": "Nightlife",
            "time": "6:00 PM",
            "duration_label": "2 hours",
            "description": (
                "End your adventure with amazing city views, craft cocktails, and a lively "
                "atmosphere. Perfect for celebrating an exciting day."
            ),
            "cost_label": "$30-50",
            "address": "321 Sky Tower",
            "tips": "Make a reservation for the best sunset views",
        },
    ],
    "chill": [
        {
            "name": "Botanical Garden",
            "type": "Park",
            "time": "10:00 AM",
            "duration_label": "2 hours",
            "description": (
                "Wander through peaceful gardens filled with beautiful flowers and quiet "
                "walking paths. Perfect for meditation and connecting with nature."
            ),
            "cost_label": "$8-12",
            "address": "100 Garden Lane",
            "tips": "Visit the rose garden and bring a book to read by the pond",
        },
        {
            "name": "Cozy Bookstore Cafe",
            "type": "Cafe",
            "time": "12:30 PM",
            "duration_label": "1.5 hours",
            "description": (
                "Relax in a quiet cafe surrounded by books, with excellent coffee and "
                "comfortable seating. Ideal for unwinding and people-watching."
            ),
            "cost_label": "$10-15",
            "address": "234 Literary St",
            "tips": "Try their signature latte and browse the local authors section",
        },
        {
            "name": "Art Gallery",
            "type": "Cultural",
            "time": "2:30 PM",
            "duration_label": "1.5 hours",
            "description": (
                "Explore serene gallery spaces featuring local and contemporary art in a "
                "peaceful, contemplative environment."
            ),
            "cost_label": "$5-10",
            "address": "567 Arts District",
            "tips": "Free admission on first Fridays, and they often have artist talks",
        },
        {
            "name": "Spa & Wellness Center",
            "type": "Wellness",
            "time": "4:30 PM",
            "duration_label": "2 hours",
            "description": (
                "Indulge in relaxing treatments and a peaceful atmosphere for the ultimate "
                "unwinding experience. Perfect end to a chill day."
            ),
            "cost_label": "$40-80",
            "address": "890 Wellness Way",
            "tips": "Book treatments in advance and arrive 15 minutes early",
        },
    ],
    "nature": [
        {
            "name": "Nature Trail",
            "type": "Hiking",
            "time": "9:00 AM",
            "duration_label": "3 hours",
            "description": (
                "Explore scenic hiking trails with beautiful views and wildlife spotting "
                "opportunities. Perfect for connecting with the outdoors."
            ),
            "cost_label": "Free",
            "address": "Trailhead at Pine Ridge Park",
            "tips": "Bring water, comfortable shoes, and a camera for wildlife",
        },
        {
            "name": "Lakeside Picnic Area",
            "type": "Park",
            "time": "12:30 PM",
            "duration_label": "1.5 hours",
            "description": (
                "Enjoy lunch with stunning lake views and fresh air. Perfect spot for "
                "relaxation and taking in natural beauty."
            ),
            "cost_label": "$5 parking",
            "address": "Crystal Lake Park",
            "tips": "Pack a picnic or grab food from the nearby deli",
        },
        {
            "name": "Wildlife Sanctuary",
            "type": "Nature Center",
            "time": "2:30 PM",
            "duration_label": "2 hours",
            "description": (
                "Learn about local wildlife and conservation efforts while observing native "
                "animals in their natural habitats."
            ),
            "cost_label": "$8-15",
            "address": "456 Conservation Dr",
            "tips": "Check feeding times for the best wildlife viewing opportunities",
        },
        {
            "name": "Sunset Viewpoint",
            "type": "Scenic Spot",
            "time": "5:30 PM",
            "duration_label": "1 hour",
            "description": (
                "Watch a breathtaking sunset over the landscape from this popular viewpoint. "
                "Perfect ending to a nature-filled day."
            ),
            "cost_label": "Free",
            "address": "Eagle Point Overlook",
            "tips": "Arrive 30 minutes before sunset for the best photos",
        },
    ],
    "romantic": [
        {
            "name": "Historic Garden",
            "type": "Garden",
            "time": "10:00 AM",
            "duration_label": "1.5 hours",
            "description": (
                "Stroll through romantic gardens with beautiful flowers, fountains, and "
                "intimate pathways perfect for couples."
            ),
            "cost_label": "$10-15",
            "address": "123 Romance Lane",
            "tips": "Perfect for photos together, especially near the fountain",
        },
        {
            "name": "Wine Tasting Room",
            "type": "Wine Bar",
            "time": "12:00 PM",
            "duration_label": "2 hours",
            "description": (
                "Enjoy an intimate wine tasting experience with local vintages and cheese "
                "pairings in a cozy, romantic setting."
            ),
            "cost_label": "$25-40",
            "address": "789 Vineyard St",
            "tips": "Ask about private tastings and wine pairing recommendations",
        },
        {
            "name": "Couples Spa",
            "type": "Spa",
            "time": "3:00 PM",
            "duration_label": "2 hours",
            "description": (
                "Relax together with a couples massage and spa treatments in a romantic, "
                "peaceful environment designed for two."
            ),
            "cost_label": "$80-150",
            "address": "456 Serenity Ave",
            "tips": "Book the couples suite and arrive early to enjoy the amenities",
        },
        {
            "name": "Fine Dining Restaurant",
            "type": "Restaurant",
            "time": "6:30 PM",
            "duration_label": "2 hours",
            "description": (
                "End your romantic day with exceptional cuisine in an elegant restaurant with "
                "intimate ambiance and attentive service."
            ),
            "cost_label": "$60-100",
            "address": "321 Gourmet Blvd",
            "tips": "Request a table by the window and mention if it's a special occasion",
        },
    ],
}

MOCK_TRIP_NOTES = {
    "best_time_to_start": "9:00 AM",
    "transportation_tips": (
        "Walking and public transport recommended for most locations. "
        "Consider ride-sharing for longer distances between stops."
    ),
    "weather_notes": (
        "Check the weather forecast and dress appropriately. Some outdoor activities may be "
        "weather-dependent, so have indoor alternatives ready."
    ),
    "additional_tips": (
        "Book reservations in advance for restaurants and spa treatments. Bring a camera to "
        "capture memories, and stay hydrated throughout the day!"
    ),
}


def get_mock_itinerary(mood: str, location: str) -> dict[str, Any]:
    """
    Build the canned itinerary body for a mood.

    Args:
        mood: Trip mood; anything unrecognized uses the "fun" template
        location: Destination shown in the title and description

    Returns:
        Dict with title, description, places and trip notes
    """
    key = mood if mood in MOOD_PLACES else DEFAULT_MOOD
    return {
        "title": f"{MOOD_TITLES[key]} in {location}",
        "description": (
            f"A perfect {key} day planned just for you in {location}. Discover amazing places "
            "and create unforgettable memories with this carefully curated itinerary."
        ),
        "places": [dict(place) for place in MOOD_PLACES[key]],
        **MOCK_TRIP_NOTES,
    }
