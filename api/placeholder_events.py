"""Synthetic events served when the events search API is unavailable."""

from __future__ import annotations

import random
from datetime import date, timedelta
from typing import Any

MAX_PLACEHOLDER_EVENTS = 20

CATEGORIES = ["Concert", "Festival", "Sports", "Theater", "Comedy", "Art"]
VENUES = ["Madison Square Garden", "Central Park", "Brooklyn Bowl", "Blue Note", "Apollo Theater"]


def generate_placeholder_events(
    lat: float = 0.0,
    lng: float = 0.0,
    limit: float = MAX_PLACEHOLDER_EVENTS,
    rng: random.Random | None = None,
) -> list[dict[str, Any]]:
    """Return ``min(limit, 20)`` events scattered around ``(lat, lng)``."""
    rng = rng or random.Random()
    count = max(0, min(int(limit), MAX_PLACEHOLDER_EVENTS))
    today = date.today()

    events = []
    for i in range(count):
        category = CATEGORIES[i % len(CATEGORIES)]
        start_date = today + timedelta(days=rng.randrange(30))
        events.append({
            "id": f"mock_{i + 1}",
            "name": f"{category} Event {i + 1}",
            "description": f"Amazing {category.lower()} event happening soon!",
            "venue": {
                "name": VENUES[i % len(VENUES)],
                "address": f"{100 + i} Main Street",
                "city": "San Francisco",
                "state": "CA",
                "latitude": lat + (rng.random() - 0.5) * 0.1,
                "longitude": lng + (rng.random() - 0.5) * 0.1,
            },
            "dates": {
                "start": {
                    "localDate": start_date.isoformat(),
                    "localTime": f"{19 + (i % 3)}:00:00",
                },
            },
            "images": [{
                "url": f"https://picsum.photos/seed/{i}/400/300",
                "width": 400,
                "height": 300,
            }],
            "priceRanges": [{
                "min": 20 + (i * 5),
                "max": 50 + (i * 10),
                "currency": "USD",
            }],
            "url": f"https://example.com/event/{i + 1}",
            "distance": f"{rng.random() * 10:.1f}",
            "segment": {"name": category},
        })
    return events
