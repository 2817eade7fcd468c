"""
Specialization Classifier

Maps the free text of a repair request (title + description) to the trade
that should handle it. Pure functions; no state is held between calls.

Matching is a case-insensitive substring search over a curated keyword
set per trade. Trades are checked in priority order so that the more
specific vocabulary wins ("dishwasher leak" is an appliance job, not a
plumbing one). Text that matches nothing falls back to general
maintenance.
"""

from typing import Dict, List, Tuple, Union

from dispatchx.models.entities import Specialization


SPECIALIZATION_KEYWORDS: Dict[Specialization, Tuple[str, ...]] = {
    Specialization.PLUMBING: (
        "plumb", "leak", "water", "drain", "pipe", "faucet", "toilet", "sink",
        "clog", "drip", "flush", "sewer",
    ),
    Specialization.ELECTRICAL: (
        "electric", "power", "outlet", "wiring", "light", "switch", "breaker",
        "circuit", "lamp", "fixture", "voltage", "spark",
    ),
    Specialization.HVAC: (
        "hvac", "furnace", "thermostat", "ventilation", "conditioner",
        "heating system", "cooling system", "heat pump", "air conditioning",
    ),
    Specialization.LOCKSMITH: (
        "lock", "key", "security", "deadbolt", "locked out", "lockout",
        "unlock", "rekey",
    ),
    Specialization.PAINTING: ("paint", "repaint", "brush", "roller", "color"),
    Specialization.CARPENTRY: ("wood", "cabinet", "carpenter", "shelf", "wooden"),
    Specialization.APPLIANCE_REPAIR: (
        "appliance", "refrigerator", "washer", "dryer", "dishwasher", "oven",
        "stove", "microwave", "freezer",
    ),
}

# First match wins
PRIORITY_ORDER: List[Specialization] = [
    Specialization.APPLIANCE_REPAIR,
    Specialization.LOCKSMITH,
    Specialization.PLUMBING,
    Specialization.ELECTRICAL,
    Specialization.HVAC,
    Specialization.PAINTING,
    Specialization.CARPENTRY,
]

_ALIASES: Dict[str, Specialization] = {
    "plumbing": Specialization.PLUMBING,
    "plumber": Specialization.PLUMBING,
    "electrical": Specialization.ELECTRICAL,
    "electrician": Specialization.ELECTRICAL,
    "hvac": Specialization.HVAC,
    "hvac technician": Specialization.HVAC,
    "heating": Specialization.HVAC,
    "cooling": Specialization.HVAC,
    "carpentry": Specialization.CARPENTRY,
    "carpenter": Specialization.CARPENTRY,
    "painting": Specialization.PAINTING,
    "painter": Specialization.PAINTING,
    "locksmith": Specialization.LOCKSMITH,
    "appliance repair": Specialization.APPLIANCE_REPAIR,
    "appliance technician": Specialization.APPLIANCE_REPAIR,
    "appliancerepair": Specialization.APPLIANCE_REPAIR,
    "general maintenance": Specialization.GENERAL_MAINTENANCE,
    "generalmaintenance": Specialization.GENERAL_MAINTENANCE,
    "maintenance": Specialization.GENERAL_MAINTENANCE,
    "general": Specialization.GENERAL_MAINTENANCE,
}


def classify(title: str, description: str) -> Specialization:
    """
    Determine the trade required for a request.

    Args:
        title: Request title (may be empty)
        description: Request description (may be empty)

    Returns:
        The first specialization in PRIORITY_ORDER whose keywords occur in
        the combined text, or GENERAL_MAINTENANCE when none do.
    """
    title = title or ""
    description = description or ""
    if not title.strip() and not description.strip():
        return Specialization.GENERAL_MAINTENANCE

    text = f"{title} {description}".lower()
    for specialization in PRIORITY_ORDER:
        if any(keyword in text for keyword in SPECIALIZATION_KEYWORDS[specialization]):
            return specialization
    return Specialization.GENERAL_MAINTENANCE


def as_specialization(value: Union[Specialization, str]) -> Specialization:
    """Pass categories through; parse anything else as a free-text trade name."""
    if isinstance(value, Specialization):
        return value
    return parse_specialization(value)


def parse_specialization(text: str) -> Specialization:
    """Normalize a free-text trade name ("plumber", "HVAC technician") to a category."""
    if not text or not text.strip():
        return Specialization.GENERAL_MAINTENANCE

    normalized = " ".join(text.strip().lower().split())
    if normalized in _ALIASES:
        return _ALIASES[normalized]
    for specialization in Specialization:
        if normalized == specialization.name.lower() or normalized == specialization.value.lower():
            return specialization
    return Specialization.GENERAL_MAINTENANCE
