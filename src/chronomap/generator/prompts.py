"""Prompt text and Gemini response schemas for snapshot generation."""

from __future__ import annotations

from typing import Any

from chronomap.core.settings import LocaleName

_LANGUAGE_INSTRUCTIONS: dict[str, str] = {
    "en": "Respond in English.",
    "zh": "Respond entirely in Chinese (Simplified).",
}


def format_year(year: int) -> str:
    """Render a signed year as ``"44 BC"`` / ``"1066 AD"``."""
    return f"{abs(year)} BC" if year < 0 else f"{year} AD"


def snapshot_prompt(year: int, locale: LocaleName) -> str:
    """Build the historian prompt for one year."""
    language = _LANGUAGE_INSTRUCTIONS.get(locale, _LANGUAGE_INSTRUCTIONS["en"])
    return f"""You are an expert academic historian.
Generate a strictly accurate historical snapshot for the year {format_year(year)}.
{language}

Requirements:
1. Civilizations: identify the top 4-6 powers.
   - lat/lng must be the capital or center of power.
   - radiusKm must represent the effective area of control or influence.
     Do not exaggerate.
   - Give rigorous detail for government, society and culture.
   - Provide 1-2 distinct academic sources (books or journals) for each.
2. Interactions: 3-5 major geopolitical interactions
   (conflict, trade, culture, diplomacy) with endpoint coordinates.
3. Figures: 5-8 key figures across the civilizations.
4. Relationship graph: people, nations and organizations, linked by
   kinship, political, hostile or mentor relations. Link source/target
   must be node ids.

The "year" field must be {year}. Return pure JSON.
"""


def search_prompt(query: str) -> str:
    """Build the prompt mapping a free-text query to one year."""
    return (
        "Identify the single most significant historical year for: "
        f"{query!r}. Use negative numbers for BC years. "
        'Return JSON: { "year": number }'
    )


_STRING: dict[str, Any] = {"type": "STRING"}
_NUMBER: dict[str, Any] = {"type": "NUMBER"}
_STRINGS: dict[str, Any] = {"type": "ARRAY", "items": _STRING}

_PERSON: dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "name": _STRING,
        "role": _STRING,
        "lifespan": _STRING,
        "impact": _STRING,
        "works": _STRING,
    },
}

_CIVILIZATION: dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "name": _STRING,
        "lat": _NUMBER,
        "lng": _NUMBER,
        "radiusKm": _NUMBER,
        "color": _STRING,
        "overview": _STRING,
        "government": {
            "type": "OBJECT",
            "properties": {
                "type": _STRING,
                "leaders": _STRINGS,
                "structure": _STRING,
                "parties": _STRING,
            },
        },
        "society": {
            "type": "OBJECT",
            "properties": {
                "population": _STRING,
                "economy": _STRING,
                "military": _STRING,
                "culture": _STRING,
            },
        },
        "figures": {"type": "ARRAY", "items": _PERSON},
        "sources": _STRINGS,
    },
    "required": ["name", "lat", "lng", "radiusKm", "color"],
}

_INTERACTION: dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "type": {"type": "STRING", "enum": ["conflict", "trade", "culture", "diplomacy"]},
        "fromLat": _NUMBER,
        "fromLng": _NUMBER,
        "toLat": _NUMBER,
        "toLng": _NUMBER,
        "title": _STRING,
        "description": _STRING,
        "impact": _STRING,
        "participants": _STRINGS,
    },
    "required": ["type", "fromLat", "fromLng", "toLat", "toLng", "title"],
}

_RELATIONSHIPS: dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "description": _STRING,
        "nodes": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {"id": _STRING, "group": _STRING, "details": _STRING},
            },
        },
        "links": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "source": _STRING,
                    "target": _STRING,
                    "label": _STRING,
                    "type": _STRING,
                },
            },
        },
    },
}

SNAPSHOT_SCHEMA: dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "year": {"type": "INTEGER"},
        "summary": _STRING,
        "civilizations": {"type": "ARRAY", "items": _CIVILIZATION},
        "interactions": {"type": "ARRAY", "items": _INTERACTION},
        "relationships": _RELATIONSHIPS,
    },
    "required": ["year", "civilizations", "interactions"],
}

SEARCH_SCHEMA: dict[str, Any] = {
    "type": "OBJECT",
    "properties": {"year": {"type": "INTEGER"}},
    "required": ["year"],
}


__all__ = ["format_year", "snapshot_prompt", "search_prompt", "SNAPSHOT_SCHEMA", "SEARCH_SCHEMA"]
