"""
Guideline-based resource prediction for disaster response.

Each disaster type has a table of per-person ratios; quantities are rounded
up to whole units. Unknown disaster types use a general-purpose table.
"""

import math
from typing import Callable, Dict, Optional

from triage_hub.models.triage import DisasterType, ResourcePrediction


FALLBACK_NOTE = "Fallback prediction based on standard emergency response guidelines"

# resource name -> quantity as a function of the affected population
ResourceTable = Dict[str, Callable[[int], float]]

RESOURCE_TABLES: Dict[DisasterType, ResourceTable] = {
    DisasterType.FLOOD: {
        "water": lambda p: p * 5,
        "food_rations": lambda p: p * 3,
        "blankets": lambda p: p,
        "first_aid_kits": lambda p: p / 50,
        "emergency_kits": lambda p: p / 10,
        "volunteers": lambda p: p / 100,
        "boats": lambda p: max(1, math.ceil(p / 500)),
        "life_jackets": lambda p: p / 2,
    },
    DisasterType.EARTHQUAKE: {
        "tents": lambda p: p / 5,
        "first_aid_kits": lambda p: p / 20,
        "rescue_teams": lambda p: p / 500,
        "heavy_equipment": lambda p: p / 1000,
        "volunteers": lambda p: p / 50,
        "blankets": lambda p: p * 2,
        "food_rations": lambda p: p * 2,
        "water": lambda p: p * 3,
    },
    DisasterType.FIRE: {
        "temporary_shelter": lambda p: p / 10,
        "clothing": lambda p: p,
        "food_rations": lambda p: p * 2,
        "counseling_teams": lambda p: p / 100,
        "volunteers": lambda p: p / 75,
        "first_aid_kits": lambda p: p / 30,
        "blankets": lambda p: p,
    },
    DisasterType.TYPHOON: {
        "water": lambda p: p * 4,
        "canned_goods": lambda p: p * 7,
        "emergency_kits": lambda p: p,
        "generators": lambda p: p / 200,
        "volunteers": lambda p: p / 80,
        "first_aid_kits": lambda p: p / 40,
        "blankets": lambda p: p * 1.5,
    },
    DisasterType.MEDICAL: {
        "first_aid_kits": lambda p: p / 10,
        "masks": lambda p: p * 10,
        "sanitizer_liters": lambda p: p / 5,
        "volunteers": lambda p: p / 50,
        "ambulance_units": lambda p: max(1, math.ceil(p / 1000)),
    },
}

DEFAULT_TABLE: ResourceTable = {
    "water": lambda p: p * 3,
    "food_rations": lambda p: p * 2,
    "blankets": lambda p: p,
    "first_aid_kits": lambda p: p / 30,
    "volunteers": lambda p: p / 100,
    "emergency_kits": lambda p: p / 20,
}


def resolve_disaster_type(disaster_type: Optional[str]) -> Optional[DisasterType]:
    """Case-insensitive lookup; None for types without a dedicated table."""
    try:
        return DisasterType((disaster_type or "").strip().upper())
    except ValueError:
        return None


def normalize_population(affected_population) -> int:
    """Whole number of people affected; anything unusable counts as 0."""
    try:
        return max(0, int(affected_population))
    except (TypeError, ValueError, OverflowError):
        # None, NaN, infinity or non-numeric text
        return 0


def predict_resources(disaster_type: Optional[str], affected_population) -> ResourcePrediction:
    """
    Predict resource quantities for a disaster.

    Args:
        disaster_type: FLOOD, EARTHQUAKE, FIRE, TYPHOON, MEDICAL or anything else
        affected_population: Number of people affected (negatives and non-finite values count as 0)

    Returns:
        ResourcePrediction marked as a guideline-based fallback
    """
    population = normalize_population(affected_population)

    table = RESOURCE_TABLES.get(resolve_disaster_type(disaster_type), DEFAULT_TABLE)
    quantities = {name: int(math.ceil(formula(population))) for name, formula in table.items()}

    return ResourcePrediction(
        disaster_type=disaster_type or "",
        affected_population=population,
        quantities=quantities,
        status="success",
        note=FALLBACK_NOTE,
    )
