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

"""Tests for trip synopsis and coaching tip selection."""
import os
import sys

import pytest

# Add parent directory to path for imports
PARENT_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if PARENT_DIR not in sys.path:
    sys.path.insert(0, PARENT_DIR)

from core.calculator import calculate_safety_score
from core.structures import (
    EventCounts,
    SafetyScoreResult,
    ScoreBreakdown,
    TripMetrics,
    ValidationResult,
)
from core.summary import generate_trip_summary, select_primary_category
from locales.strings import TIPS
from trip_factory import steady_trip


@pytest.mark.parametrize("breakdown,expected", [
    (ScoreBreakdown(hard_brakes=3.0), 'hard_brakes'),
    (ScoreBreakdown(hard_brakes=1.0, speeding_time=1.2), 'speeding_time'),
    (ScoreBreakdown(phone_interaction=0.5), 'phone_interaction'),
    (ScoreBreakdown(hard_accelerations=2.0, harsh_corners=2.0), 'hard_accelerations'),
    (ScoreBreakdown(harsh_corners=1.0, speeding_time=1.0, phone_interaction=1.0), 'harsh_corners'),
    (ScoreBreakdown(), 'hard_brakes'),
])
def test_primary_category(breakdown, expected):
    assert select_primary_category(breakdown) == expected


def test_summary_of_clean_trip():
    summary = generate_trip_summary(calculate_safety_score(steady_trip()))

    assert summary.summary == (
        "Trip summary: Score 10/10 • Distance 10.0 km • Duration 20 min • "
        "Events HB 0, HA 0, HC 0 • Speeding 0% • Phone use 0 min."
    )
    assert summary.primary_category == 'hard_brakes'
    assert summary.recommendation == f"Recommendation: {TIPS['hard_brakes']}"


def test_summary_embeds_events():
    result = SafetyScoreResult(
        total_score=6.5,
        breakdown=ScoreBreakdown(hard_brakes=1.5, phone_interaction=2.0),
        events=EventCounts(hard_brake_count=1, hard_accel_count=2, harsh_corner_count=3,
                           speeding_percentage=12, phone_use_minutes=4.0),
        trip_metrics=TripMetrics(distance_km=12.345, duration_minutes=24.5,
                                 avg_speed_kmh=30.2, max_speed_kmh=60.0,
                                 moving_time_minutes=22.0),
        validation=ValidationResult(is_valid=True),
    )
    summary = generate_trip_summary(result)

    assert summary.summary == (
        "Trip summary: Score 6.5/10 • Distance 12.3 km • Duration 25 min • "
        "Events HB 1, HA 2, HC 3 • Speeding 12% • Phone use 4 min."
    )
    assert summary.primary_category == 'phone_interaction'
    assert TIPS['phone_interaction'] in summary.recommendation


def test_every_category_has_a_tip():
    for category, _ in ScoreBreakdown().as_ordered_items():
        assert TIPS[category]
