#!/usr/bin/env python3
# DriveScore - driver safety telemetry scoring engine
# Copyright (C) 2024 DriveScore Contributors
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE. See the
# GNU Affero General Public License for more details.
#
# You should have received a copy of the GNU Affero General Public License
# along with this program. If not, see <https://www.gnu.org/licenses/>.

"""
Penalty normalization and score composition.

Event penalties are expressed per 10 km driven, so a trip shorter than
10 km pays more per incident than a longer one.
"""
try:
    from .. import config
except ImportError:
    import config

from .helpers import round_half_up
from .structures import ScoreBreakdown


def normalized_distance(distance_km):
    """Trip distance in units of DISTANCE_NORMALIZATION_KM."""
    return distance_km / getattr(config, 'DISTANCE_NORMALIZATION_KM', 10.0)


def _per_distance(count, distance_normalized, weight):
    if distance_normalized <= 0:
        return 0.0
    return (count / distance_normalized) * weight


def calculate_penalties(distance_km, hard_brake_count, hard_accel_count,
                        harsh_corner_count, speeding_fraction, phone_minutes):
    """
    Turn raw event counts and times into per-category penalties.

    Args:
        distance_km: trip distance
        hard_brake_count: detected hard braking events
        hard_accel_count: detected hard acceleration events
        harsh_corner_count: detected harsh cornering events
        speeding_fraction: share of time spent speeding (0..1)
        phone_minutes: minutes of phone interaction

    Returns:
        ScoreBreakdown
    """
    distance_normalized = normalized_distance(distance_km)

    return ScoreBreakdown(
        hard_brakes=_per_distance(hard_brake_count, distance_normalized, config.PENALTY_HARD_BRAKE),
        hard_accelerations=_per_distance(hard_accel_count, distance_normalized, config.PENALTY_HARD_ACCEL),
        harsh_corners=_per_distance(harsh_corner_count, distance_normalized, config.PENALTY_HARSH_CORNER),
        speeding_time=speeding_fraction * config.PENALTY_SPEEDING_MULTIPLIER,
        phone_interaction=phone_minutes * config.PENALTY_PHONE_PER_MINUTE,
    )


def compose_score(breakdown):
    """
    Final score: MAX_SCORE minus all penalties, clamped to [0, MAX_SCORE]
    and rounded half-up to SCORE_DECIMALS.
    """
    max_score = config.MAX_SCORE
    score = max(0.0, min(max_score, max_score - breakdown.total()))
    return round_half_up(score, getattr(config, 'SCORE_DECIMALS', 1))
