"""Domain enumerations: categories, difficulty tiers, transport modes, sorting."""

import enum

from .errors import ValidationError


class POICategory(str, enum.Enum):
    ATTRACTION = "attraction"
    RESTAURANT = "restaurant"
    HOTEL = "hotel"
    SHOPPING = "shopping"
    ENTERTAINMENT = "entertainment"
    TRANSPORT = "transport"
    HEALTH = "health"
    EDUCATION = "education"
    RELIGIOUS = "religious"
    NATURE = "nature"
    CULTURE = "culture"
    SPORT = "sport"
    OTHER = "other"


class Difficulty(str, enum.Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class TransportMode(str, enum.Enum):
    WALKING = "walking"
    BICYCLING = "bicycling"
    DRIVING = "driving"
    TRANSIT = "transit"


class SortOrder(str, enum.Enum):
    ASC = "asc"
    DESC = "desc"


class SortBy(str, enum.Enum):
    DISTANCE = "distance"
    RATING = "rating"
    CREATED_AT = "createdAt"

    @classmethod
    def parse(cls, value: "str | SortBy") -> "SortBy":
        """Map a free-form sort key to a member; unknown keys are rejected."""
        if isinstance(value, cls):
            return value
        aliases = {"recency": cls.CREATED_AT, "created_at": cls.CREATED_AT}
        try:
            return aliases.get(value) or cls(value)
        except ValueError:
            raise ValidationError(
                f"Unsupported sort field {value!r}; "
                f"expected one of {[m.value for m in cls]}"
            ) from None
