"""
Unit tests for the desirability score.

Covers:
- Weighted combination of normalised distance and rating
- Extra rating weight for poor (1-2) curbs
- Sentinel score for unusable (rating 0) curbs
- Monotonicity in distance
- Rejection of out-of-range inputs
"""

import pytest

from curb_locator.scoring import UNUSABLE_SCORE, score


class TestWeightedScore:
    def test_close_good_spot(self):
        # 50 m -> 5 * 0.8 = 4; rating 8 -> 20 * 0.2 = 4
        assert score(50, 8) == pytest.approx(8.0)

    def test_mid_distance_average_spot(self):
        # 300 m -> 30 * 0.8 = 24; rating 5 -> 50 * 0.2 = 10
        assert score(300, 5) == pytest.approx(34.0)

    def test_perfect_spot_at_address_scores_zero(self):
        assert score(0, 10) == pytest.approx(0.0)

    def test_beyond_comfort_radius_still_scored(self):
        # 2 km -> 200 * 0.8 = 160; rating 10 -> 0
        assert score(2000, 10) == pytest.approx(160.0)

    def test_custom_comfort_radius(self):
        assert score(250, 10, comfort_radius_m=500) == pytest.approx(40.0)


class TestPoorRatings:
    def test_rating_two_shifts_one_tenth(self):
        # weights 0.7 / 0.3: 10 * 0.7 + 80 * 0.3
        assert score(100, 2) == pytest.approx(31.0)

    def test_rating_one_shifts_two_tenths(self):
        # weights 0.6 / 0.4: 10 * 0.6 + 90 * 0.4
        assert score(100, 1) == pytest.approx(42.0)

    def test_rating_three_uses_base_weights(self):
        assert score(100, 3) == pytest.approx(10 * 0.8 + 70 * 0.2)

    def test_poor_close_spot_loses_to_good_farther_spot(self):
        assert score(50, 1) > score(300, 8)


class TestUnusableSentinel:
    @pytest.mark.parametrize("distance", [0, 10, 999, 50_000])
    def test_rating_zero_is_sentinel(self, distance):
        assert score(distance, 0) == UNUSABLE_SCORE

    @pytest.mark.parametrize("rating", range(1, 11))
    def test_sentinel_beats_every_usable_rating(self, rating):
        # up to 100 km away
        assert score(100_000, rating) < score(0, 0)


class TestMonotonicity:
    @pytest.mark.parametrize("rating", range(1, 11))
    def test_non_decreasing_in_distance(self, rating):
        distances = [0, 1, 50, 300, 999, 1000, 1500, 10_000]
        scores = [score(d, rating) for d in distances]
        assert scores == sorted(scores)


class TestInvalidInput:
    def test_negative_distance_raises(self):
        with pytest.raises(ValueError):
            score(-1, 5)

    @pytest.mark.parametrize("rating", [-1, 11])
    def test_rating_out_of_range_raises(self, rating):
        with pytest.raises(ValueError):
            score(10, rating)
