import math
from dataclasses import dataclass
from enum import Enum


class Usage(str, Enum):
    SALE = "venda"
    RENT = "aluguel"


class RentalType(str, Enum):
    MONTHLY = "mensal"
    DAILY = "diario"


@dataclass(frozen=True)
class Coordinates:
    latitude: float
    longitude: float

    def rounded(self, places: int = 3) -> tuple[float, float]:
        """Snap to a decimal grid, halves towards +infinity (-22.9375 -> -22.937)."""
        scale = 10 ** places
        return (
            math.floor(self.latitude * scale + 0.5) / scale,
            math.floor(self.longitude * scale + 0.5) / scale,
        )


@dataclass(frozen=True)
class GeocodeResult:
    zipcode: str
    source: str  # "nominatim" | "google"
    address: str | None = None
    neighbourhood: str | None = None
    city: str | None = None
    state: str | None = None


@dataclass(frozen=True)
class PropertyAttributes:
    """The subject property being valued."""
    property_type: str
    bedrooms: int
    bathrooms: int
    size: float  # m²
    parking_spaces: int = 0
    furnished: bool = False
    usage: Usage | None = None
    rental_type: RentalType | None = None
    coordinates: Coordinates | None = None
    zipcode: str | None = None
    city: str = ""
    state: str = ""


@dataclass(frozen=True)
class Comparable:
    id: str
    property_type: str
    price: float
    bedrooms: int
    bathrooms: int
    size: float
    parking_spaces: int = 0
    furnished: bool = False
    usage: str | None = None
    rental_type: str | None = None
    coordinates: Coordinates | None = None
    city: str = ""
    state: str = ""
    neighborhood: str | None = None
    street: str = ""
    link: str | None = None
    similarity_score: float | None = None
    distance_km: float | None = None

    @property
    def price_per_area(self) -> float:
        return self.price / self.size if self.size > 0 else 0.0
