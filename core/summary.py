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

"""Trip synopsis and coaching tip."""

try:
    from ..locales.strings import SUMMARY, TIPS
except ImportError:
    from locales.strings import SUMMARY, TIPS

from .helpers import round_half_up
from .structures import TripSummary, CATEGORY_ORDER


def select_primary_category(breakdown):
    """
    Category with the largest penalty.

    Ties go to the category that comes first in CATEGORY_ORDER, so a trip
    without any penalty selects the first category.
    """
    primary, largest = CATEGORY_ORDER[0], None
    for category, penalty in breakdown.as_ordered_items():
        if largest is None or penalty > largest:
            primary, largest = category, penalty
    return primary


def generate_trip_summary(result):
    """
    Render the fixed-template synopsis and pick one coaching tip.

    Args:
        result: SafetyScoreResult

    Returns:
        TripSummary
    """
    metrics = result.trip_metrics
    events = result.events

    summary = SUMMARY['summary'].format(
        score=result.total_score,
        distance_km=metrics.distance_km,
        duration_minutes=int(round_half_up(metrics.duration_minutes, 0)),
        hard_brakes=events.hard_brake_count,
        hard_accels=events.hard_accel_count,
        harsh_corners=events.harsh_corner_count,
        speeding_percentage=events.speeding_percentage,
        phone_minutes=events.phone_use_minutes,
    )

    primary_category = select_primary_category(result.breakdown)
    recommendation = SUMMARY['recommendation'].format(tip=TIPS[primary_category])

    return TripSummary(
        summary=summary,
        recommendation=recommendation,
        primary_category=primary_category,
    )
