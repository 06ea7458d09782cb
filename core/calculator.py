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
Main DriveScore calculation engine.
Contains calculate_safety_score for scoring one assembled trip.
"""
import logging

from .detectors import (
    detect_hard_braking,
    detect_hard_acceleration,
    detect_harsh_cornering,
    detect_speeding,
    calculate_phone_interaction,
)
from .helpers import flatten_chunks, round_half_up
from .metrics import calculate_trip_metrics
from .penalties import calculate_penalties, compose_score
from .structures import (
    EventCounts,
    SafetyScoreResult,
    ScoreBreakdown,
    PERCENT,
)
from .validation import validate_trip

logger = logging.getLogger(__name__)


def calculate_safety_score(chunks):
    """
    Score one driving trip.

    Chunks and the samples inside them must already be in chronological
    order; they are concatenated as given. The computation keeps no state
    between calls and never modifies its input.

    Args:
        chunks: ordered sequence of TelemetryChunk (may be empty)

    Returns:
        SafetyScoreResult: {
            total_score: 0..10 (0 for invalid trips),
            breakdown: ScoreBreakdown of penalty points,
            events: EventCounts,
            trip_metrics: TripMetrics,
            validation: ValidationResult,
            event_indices: {'hard_brakes': [...], 'hard_accelerations': [...],
                            'harsh_corners': [...]} inertial sample indices
        }
    """
    logger.info(f"Calculating safety score from {len(chunks)} chunks")

    locations, inertial = flatten_chunks(chunks)

    trip_metrics = calculate_trip_metrics(locations)

    validation = validate_trip(trip_metrics, locations, inertial)
    if not validation.is_valid:
        return SafetyScoreResult(
            total_score=0.0,
            breakdown=ScoreBreakdown(),
            events=EventCounts(),
            trip_metrics=trip_metrics,
            validation=validation,
        )

    # === EVENT DETECTION ===
    hard_brakes = detect_hard_braking(inertial)
    hard_accels = detect_hard_acceleration(inertial)
    harsh_corners = detect_harsh_cornering(inertial)
    speeding = detect_speeding(locations)
    phone_minutes = calculate_phone_interaction(chunks)

    # === PENALTIES AND SCORE ===
    breakdown = calculate_penalties(
        trip_metrics.distance_km,
        len(hard_brakes),
        len(hard_accels),
        len(harsh_corners),
        speeding.fraction,
        phone_minutes,
    )
    total_score = compose_score(breakdown)

    events = EventCounts(
        hard_brake_count=len(hard_brakes),
        hard_accel_count=len(hard_accels),
        harsh_corner_count=len(harsh_corners),
        speeding_percentage=int(round_half_up(speeding.fraction * PERCENT, 0)),
        phone_use_minutes=phone_minutes,
    )

    logger.info(f"Safety score calculated: {total_score}/10")

    return SafetyScoreResult(
        total_score=total_score,
        breakdown=breakdown,
        events=events,
        trip_metrics=trip_metrics,
        validation=validation,
        event_indices={
            'hard_brakes': hard_brakes,
            'hard_accelerations': hard_accels,
            'harsh_corners': harsh_corners,
        },
    )
