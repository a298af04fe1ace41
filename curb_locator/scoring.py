from __future__ import annotations

# Larger than any weighted score a usable spot reaches within any realistic
# search radius, so unusable spots always sort last.
UNUSABLE_SCORE = 100000.0

COMFORT_RADIUS_M = 1000.0

DISTANCE_WEIGHT = 0.8
RATING_WEIGHT = 0.2

# Ratings at or below this get extra rating weight
POOR_RATING = 2


def score(distance_m: float, rating: int, comfort_radius_m: float = COMFORT_RADIUS_M) -> float:
    """Desirability of a spot ``distance_m`` away with curb ``rating``; lower is better.

    Distance is normalised so that ``comfort_radius_m`` maps to 100 (farther
    spots keep growing past 100). The rating is inverted onto the same 0-100
    scale. Poorly rated spots (1-2) shift weight from distance to rating so a
    bad curb dominates even when it is close. Rating 0 (unusable) always gets
    ``UNUSABLE_SCORE``.
    """
    if distance_m < 0:
        raise ValueError(f"distance must be non-negative, got {distance_m}")
    if not 0 <= rating <= 10:
        raise ValueError(f"rating must be within 0..10, got {rating}")

    if rating == 0:
        return UNUSABLE_SCORE

    distance_norm = (distance_m / comfort_radius_m) * 100
    rating_norm = 100 - (rating * 10)

    distance_weight = DISTANCE_WEIGHT
    rating_weight = RATING_WEIGHT
    if rating <= POOR_RATING:
        shift = (POOR_RATING + 1 - rating) * 0.1
        rating_weight += shift
        distance_weight -= shift

    return distance_norm * distance_weight + rating_norm * rating_weight
