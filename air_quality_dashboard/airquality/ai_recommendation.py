"""
AI recommendation module for the Air Quality Dashboard.

Defines the AiRecommendation returned by GET /ai/recommendations/{city} and
its RecommendationCard entries. The dashboard displays these as received.
"""

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from .fields import coerce_number, coerce_text

SEVERITIES = ("low", "medium", "high")


@dataclass(frozen=True)
class RecommendationCard:
    """
    One piece of health advice.

    Attributes:
        severity: "low", "medium" or "high" (unknown values read as "medium")
        icon: Emoji shown on the card
        title: Short heading
        description: One or two sentences of advice
    """

    severity: str
    icon: str
    title: str
    description: str

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "RecommendationCard":
        if not isinstance(payload, Mapping):
            payload = {}
        severity = coerce_text(payload.get("severity")).lower()
        return cls(
            severity=severity if severity in SEVERITIES else "medium",
            icon=coerce_text(payload.get("icon")),
            title=coerce_text(payload.get("title")) or "Recommendation",
            description=coerce_text(payload.get("description")),
        )


@dataclass(frozen=True)
class AiRecommendation:
    """
    Health recommendations for a single city.

    Attributes:
        city: City name
        country: Country name or code
        aqi: Current AQI, or None
        aqi_category: Category label computed by the backend
        overall_assessment: One-paragraph summary
        recommendations: Advice cards, possibly empty
    """

    city: str
    country: str
    aqi: Optional[int]
    aqi_category: str
    overall_assessment: str
    recommendations: tuple[RecommendationCard, ...] = field(default_factory=tuple)

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "AiRecommendation":
        if not isinstance(payload, Mapping):
            payload = {}
        aqi = coerce_number(payload.get("aqi"))
        cards = payload.get("recommendations")
        if not isinstance(cards, list):
            cards = []
        return cls(
            city=coerce_text(payload.get("city")),
            country=coerce_text(payload.get("country")),
            aqi=int(round(aqi)) if aqi is not None else None,
            aqi_category=coerce_text(payload.get("aqiCategory")) or "Unknown",
            overall_assessment=coerce_text(payload.get("overallAssessment")),
            recommendations=tuple(RecommendationCard.from_dict(card) for card in cards),
        )
