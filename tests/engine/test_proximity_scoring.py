"""Tests for landmark distance, filtering and proximity scoring."""

import pytest

from valuation.engine.proximity import (
    DEFAULT_PROFILE,
    build_proximity_result,
    haversine_distance,
    has_access,
    is_likely_beach,
    overall_proximity_score,
    profile_for,
    proximity_score,
    select_landmarks,
)
from valuation.models.property import Coordinates
from valuation.models.proximity import Landmark, LandmarkCategory, Place

ORIGIN = Coordinates(-23.0, -43.0)
METERS_PER_DEGREE = 111_194.93  # 6,371 km earth radius


def north_of(origin: Coordinates, meters: float) -> Coordinates:
    return Coordinates(origin.latitude + meters / METERS_PER_DEGREE, origin.longitude)


def landmark(category: LandmarkCategory, distance: float, id: str = "x") -> Landmark:
    return Landmark(
        id=id,
        name=id,
        coordinates=north_of(ORIGIN, distance),
        category=category,
        distance_meters=distance,
        proximity_score=proximity_score(distance, category),
    )


class TestHaversine:
    def test_same_point(self):
        assert haversine_distance(ORIGIN, ORIGIN) == 0

    def test_one_millidegree_of_latitude(self):
        assert haversine_distance(ORIGIN, Coordinates(-22.999, -43.0)) == pytest.approx(111.19, abs=0.01)

    def test_symmetric(self):
        other = Coordinates(-22.95, -43.2)
        assert haversine_distance(ORIGIN, other) == pytest.approx(haversine_distance(other, ORIGIN))


class TestBeachFilter:
    @pytest.mark.parametrize("name", ["Praia do Forte", "Copacabana Beach", "Playa Blanca", "Lagoa Rodrigo de Freitas"])
    def test_accepts_waterfront(self, name):
        assert is_likely_beach(name)

    @pytest.mark.parametrize("name", ["Beach Volleyball Club", "Sunset Beach Bar", "Beach Tennis Arena", "Padaria Central"])
    def test_rejects_venues_and_unrelated(self, name):
        assert not is_likely_beach(name)


class TestProximityScore:
    def test_at_origin(self):
        assert proximity_score(0, LandmarkCategory.BEACH) == 100

    def test_linear_decay(self):
        assert proximity_score(100, LandmarkCategory.BEACH) == 50
        assert proximity_score(750, LandmarkCategory.SHOPPING_MALL) == 50

    def test_floors_at_zero(self):
        assert proximity_score(200, LandmarkCategory.BEACH) == 0
        assert proximity_score(5000, LandmarkCategory.BEACH) == 0

    def test_unmodeled_category_uses_default_threshold(self):
        assert profile_for(LandmarkCategory.METRO_STATION) == DEFAULT_PROFILE
        assert proximity_score(500, LandmarkCategory.METRO_STATION) == 50


class TestSelectLandmarks:
    def test_drops_results_beyond_radius(self):
        places = [
            Place(id="near", name="Shopping Leblon", coordinates=north_of(ORIGIN, 400)),
            Place(id="far", name="Shopping Tijuca", coordinates=north_of(ORIGIN, 1200)),
        ]
        found = select_landmarks(ORIGIN, places, LandmarkCategory.SHOPPING_MALL, 1000, 3)
        assert [l.id for l in found] == ["near"]
        assert found[0].distance_meters == pytest.approx(400, abs=0.5)

    def test_beach_name_filter(self):
        places = [
            Place(id="club", name="Beach Volleyball Club", coordinates=north_of(ORIGIN, 50)),
            Place(id="praia", name="Praia do Forte", coordinates=north_of(ORIGIN, 80)),
        ]
        found = select_landmarks(ORIGIN, places, LandmarkCategory.BEACH, 1000, 3)
        assert [l.id for l in found] == ["praia"]

    def test_name_filter_only_for_beach(self):
        places = [Place(id="club", name="Beach Volleyball Club", coordinates=north_of(ORIGIN, 50))]
        found = select_landmarks(ORIGIN, places, LandmarkCategory.GYM, 1000, 3)
        assert len(found) == 1

    def test_caps_results_in_provider_order(self):
        places = [
            Place(id=f"p{i}", name=f"Escola {i}", coordinates=north_of(ORIGIN, 300 - i * 50))
            for i in range(5)
        ]
        found = select_landmarks(ORIGIN, places, LandmarkCategory.SCHOOL, 1000, 3)
        assert [l.id for l in found] == ["p0", "p1", "p2"]

    def test_rating_carried_over(self):
        places = [Place(id="h", name="Hospital", coordinates=north_of(ORIGIN, 10), rating=4.6)]
        found = select_landmarks(ORIGIN, places, LandmarkCategory.HOSPITAL, 1000, 3)
        assert found[0].rating == 4.6


class TestOverallScore:
    def test_weighted_by_category(self):
        # beach 100 (w 0.25), shopping 50 (w 0.15) → 32.5 / 0.4
        landmarks = [landmark(LandmarkCategory.BEACH, 0), landmark(LandmarkCategory.SHOPPING_MALL, 750)]
        assert overall_proximity_score(landmarks) == 81

    def test_empty(self):
        assert overall_proximity_score([]) == 0

    def test_single_category_is_its_score(self):
        assert overall_proximity_score([landmark(LandmarkCategory.PARK, 25)]) == 50


class TestAccess:
    def test_close_enough_grants_access(self):
        assert has_access([landmark(LandmarkCategory.BEACH, 150)], LandmarkCategory.BEACH)

    def test_low_score_within_threshold_denies_access(self):
        # 170 m of a 200 m threshold scores 15
        assert not has_access([landmark(LandmarkCategory.BEACH, 170)], LandmarkCategory.BEACH)

    def test_other_category_does_not_count(self):
        assert not has_access([landmark(LandmarkCategory.PARK, 0)], LandmarkCategory.BEACH)


class TestBuildProximityResult:
    def test_merges_in_category_order(self):
        result = build_proximity_result([
            (LandmarkCategory.BEACH, [landmark(LandmarkCategory.BEACH, 50, "b")]),
            (LandmarkCategory.SHOPPING_MALL, []),
            (LandmarkCategory.PARK, [landmark(LandmarkCategory.PARK, 10, "p")]),
        ])
        assert [l.id for l in result.landmarks] == ["b", "p"]
        assert result.has_beach_access
        assert not result.has_shopping_access
        assert result.access_by_category == {
            LandmarkCategory.BEACH: True,
            LandmarkCategory.SHOPPING_MALL: False,
            LandmarkCategory.PARK: True,
        }
        assert not result.cache_hit

    def test_nothing_found(self):
        result = build_proximity_result([(LandmarkCategory.BEACH, [])])
        assert result.overall_proximity_score == 0
        assert result.landmarks == []
