"""Landmark proximity scoring engine.

Per-landmark score (0-100):
  max(0, 100 - distance / category_threshold * 100), rounded

Overall score: weighted average of landmark scores, normalized by the sum of
the weights actually used. Categories missing from CATEGORY_PROFILES use
DEFAULT_PROFILE.

Access flag for a category: some landmark within the category threshold
scoring above MIN_ACCESS_SCORE.
"""

import math

from valuation.engine.aggregation import round_half_up
from valuation.models.property import Coordinates
from valuation.models.proximity import (
    CategoryProfile,
    Landmark,
    LandmarkCategory,
    Place,
    ProximityResult,
)

EARTH_RADIUS_M = 6_371_000
MIN_ACCESS_SCORE = 20

CATEGORY_PROFILES: dict[LandmarkCategory, CategoryProfile] = {
    LandmarkCategory.BEACH: CategoryProfile(weight=0.25, threshold_meters=200, name_filter=True),
    LandmarkCategory.SHOPPING_MALL: CategoryProfile(weight=0.15, threshold_meters=1500),
    LandmarkCategory.SCHOOL: CategoryProfile(weight=0.15, threshold_meters=100),
    LandmarkCategory.HOSPITAL: CategoryProfile(weight=0.10, threshold_meters=200),
    LandmarkCategory.PARK: CategoryProfile(weight=0.10, threshold_meters=50),
    LandmarkCategory.RESTAURANT: CategoryProfile(weight=0.05, threshold_meters=1000),
    LandmarkCategory.BANK: CategoryProfile(weight=0.05, threshold_meters=1000),
    LandmarkCategory.GYM: CategoryProfile(weight=0.05, threshold_meters=500),
    LandmarkCategory.PHARMACY: CategoryProfile(weight=0.05, threshold_meters=500),
}
DEFAULT_PROFILE = CategoryProfile(weight=0.05, threshold_meters=1000)

DEFAULT_CATEGORIES: list[LandmarkCategory] = [
    LandmarkCategory.BEACH,
    LandmarkCategory.SHOPPING_MALL,
    LandmarkCategory.HOSPITAL,
    LandmarkCategory.SCHOOL,
    LandmarkCategory.PARK,
]

# Multi-lingual tokens indicating actual waterfront
BEACH_TOKENS = (
    "beach", "praia", "playa", "plage", "strand", "shore", "coast", "costa",
    "marina", "bay", "baía", "cove", "creek", "lagoon", "lagoa",
)

# Venues named after a beach that are not one
BEACH_FALSE_POSITIVES = (
    "beach club", "beach house", "beach resort", "beach hotel", "beach bar",
    "beach restaurant", "beach cafe", "beach store", "beach shop",
    "beach volleyball", "beach tennis", "beach soccer", "beach party",
    "beach wedding", "beach event", "beach festival",
)


def profile_for(category: LandmarkCategory) -> CategoryProfile:
    return CATEGORY_PROFILES.get(category, DEFAULT_PROFILE)


def haversine_distance(a: Coordinates, b: Coordinates) -> float:
    """Great-circle distance in meters."""
    lat1 = math.radians(a.latitude)
    lat2 = math.radians(b.latitude)
    dlat = math.radians(b.latitude - a.latitude)
    dlng = math.radians(b.longitude - a.longitude)

    h = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlng / 2) ** 2
    return EARTH_RADIUS_M * 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))


def is_likely_beach(name: str) -> bool:
    lowered = name.lower()
    if not any(token in lowered for token in BEACH_TOKENS):
        return False
    return not any(pattern in lowered for pattern in BEACH_FALSE_POSITIVES)


def proximity_score(distance_meters: float, category: LandmarkCategory) -> int:
    threshold = profile_for(category).threshold_meters
    return round_half_up(max(0.0, 100 - distance_meters / threshold * 100))


def select_landmarks(
    origin: Coordinates,
    places: list[Place],
    category: LandmarkCategory,
    radius_meters: float,
    max_results: int,
) -> list[Landmark]:
    """Turn raw search results into scored landmarks.

    Distances are recomputed from the origin; anything beyond the radius is
    dropped. Name-filtered categories reject places failing the heuristic.
    Provider order is kept and the list is capped at ``max_results``.
    """
    profile = profile_for(category)
    landmarks: list[Landmark] = []

    for place in places:
        if len(landmarks) >= max_results:
            break
        distance = haversine_distance(origin, place.coordinates)
        if distance > radius_meters:
            continue
        if profile.name_filter and not is_likely_beach(place.name):
            continue
        landmarks.append(Landmark(
            id=place.id,
            name=place.name,
            coordinates=place.coordinates,
            category=category,
            distance_meters=distance,
            proximity_score=proximity_score(distance, category),
            rating=place.rating,
        ))

    return landmarks


def overall_proximity_score(landmarks: list[Landmark]) -> int:
    if not landmarks:
        return 0
    total_weight = 0.0
    weighted = 0.0
    for landmark in landmarks:
        weight = profile_for(landmark.category).weight
        weighted += landmark.proximity_score * weight
        total_weight += weight
    return round_half_up(weighted / total_weight) if total_weight > 0 else 0


def has_access(landmarks: list[Landmark], category: LandmarkCategory) -> bool:
    threshold = profile_for(category).threshold_meters
    return any(
        l.category == category
        and l.distance_meters <= threshold
        and l.proximity_score > MIN_ACCESS_SCORE
        for l in landmarks
    )


def build_proximity_result(
    landmarks_by_category: list[tuple[LandmarkCategory, list[Landmark]]],
) -> ProximityResult:
    """Merge per-category landmarks in request order and score them."""
    landmarks = [l for _, found in landmarks_by_category for l in found]
    access = {category: has_access(landmarks, category) for category, _ in landmarks_by_category}

    return ProximityResult(
        landmarks=landmarks,
        overall_proximity_score=overall_proximity_score(landmarks),
        has_beach_access=has_access(landmarks, LandmarkCategory.BEACH),
        has_shopping_access=has_access(landmarks, LandmarkCategory.SHOPPING_MALL),
        access_by_category=access,
    )
