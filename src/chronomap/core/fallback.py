"""Bundled offline snapshot for year 0.

This is the only snapshot shipped with the package. It is shown when no
generator is configured and the cache has no entry for year 0, so a fresh
install always has something on the map.
"""

from __future__ import annotations

from typing import Any

from chronomap.core.contracts.snapshot import Snapshot

FALLBACK_YEAR = 0

_FALLBACK_RECORD: dict[str, Any] = {
    "year": 0,
    "summary": (
        "The world is dominated by the Pax Romana in the West and the Han Dynasty "
        "in the East. It is a period of relative stability, flourishing trade via "
        "the Silk Road, and significant cultural consolidation."
    ),
    "civilizations": [
        {
            "name": "Roman Empire",
            "lat": 41.9,
            "lng": 12.5,
            "radiusKm": 2500,
            "color": "#ef4444",
            "overview": (
                "A vast empire controlling the Mediterranean, known for law, "
                "engineering, and military prowess."
            ),
            "government": {
                "type": "Principate",
                "leaders": ["Augustus"],
                "structure": "Centralized authority under the Emperor with a symbolic Senate.",
                "parties": "Optimates vs Populares remnants",
            },
            "society": {
                "population": "~45 Million",
                "economy": "Agrarian, extensive trade networks.",
                "military": "Professional Legions.",
                "culture": "Greco-Roman polytheism, rise of stoicism.",
            },
            "figures": [
                {
                    "name": "Augustus",
                    "role": "Emperor",
                    "lifespan": "63 BC - 14 AD",
                    "impact": "Founded the Principate.",
                    "works": "Res Gestae",
                },
                {
                    "name": "Ovid",
                    "role": "Poet",
                    "lifespan": "43 BC - 17 AD",
                    "impact": "Influential Latin literature.",
                    "works": "Metamorphoses",
                },
            ],
            "sources": [
                "Cambridge Ancient History Vol. X",
                "The Roman Empire: Economy, Society and Culture (Garnsey & Saller)",
            ],
        },
        {
            "name": "Han Dynasty",
            "lat": 34.3,
            "lng": 108.9,
            "radiusKm": 2200,
            "color": "#eab308",
            "overview": (
                "The golden age of Chinese history, characterized by economic "
                "prosperity and Confucian governance."
            ),
            "government": {
                "type": "Imperial Monarchy",
                "leaders": ["Emperor Ping"],
                "structure": "Centralized bureaucracy.",
                "parties": "Consort kin factions",
            },
            "society": {
                "population": "~58 Million",
                "economy": "Silk production, iron monopoly.",
                "military": "Conscript army.",
                "culture": "Confucianism as state orthodoxy.",
            },
            "figures": [
                {
                    "name": "Wang Mang",
                    "role": "Official",
                    "lifespan": "45 BC - 23 AD",
                    "impact": "Usurper, reforms.",
                    "works": "New policies",
                },
            ],
            "sources": [
                "The Cambridge History of China, Vol. 1",
                "Records of the Grand Historian (Shiji)",
            ],
        },
    ],
    "interactions": [
        {
            "type": "trade",
            "fromLat": 34.3,
            "fromLng": 108.9,
            "toLat": 41.9,
            "toLng": 12.5,
            "title": "Silk Road",
            "description": "Indirect trade network connecting Han China and Rome.",
            "impact": "Exchange of silk, gold, glassware, and culture.",
            # "Han Empire" and "Parthian Empire" are not civilizations of this
            # snapshot; participants are free text.
            "participants": ["Han Empire", "Parthian Empire", "Roman Empire"],
        },
    ],
    "relationships": {
        "description": "Key geopolitical balance.",
        "nodes": [
            {"id": "Augustus", "group": "person"},
            {"id": "Roman Empire", "group": "nation"},
            {"id": "Han Dynasty", "group": "nation"},
            {"id": "Silk Road", "group": "organization"},
        ],
        "links": [
            {"source": "Augustus", "target": "Roman Empire", "label": "Ruler"},
            {"source": "Han Dynasty", "target": "Roman Empire", "label": "Trade"},
        ],
    },
}

FALLBACK_SNAPSHOT: Snapshot = Snapshot.model_validate(_FALLBACK_RECORD)


def fallback_for(year: int) -> Snapshot | None:
    """Return the bundled snapshot when ``year`` is the fallback year."""
    return FALLBACK_SNAPSHOT if year == FALLBACK_YEAR else None


__all__ = ["FALLBACK_YEAR", "FALLBACK_SNAPSHOT", "fallback_for"]
