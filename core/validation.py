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
Trip validity gate.

Decides whether a trip is eligible to be scored at all. Every check runs,
so a driver sees all the reasons a trip was rejected at once.

Threshold checks are written as ``not value >= minimum`` so that a NaN
metric fails the check instead of passing it.
"""
import logging

import numpy as np

try:
    from .. import config
    from ..locales.strings import VALIDATION
except ImportError:
    import config
    from locales.strings import VALIDATION

from .geodesy import haversine_distances
from .helpers import location_arrays
from .structures import ValidationIssue, ValidationResult, MS_TO_S

logger = logging.getLogger(__name__)


def validate_trip(metrics, locations, inertial):
    """
    Run the fixed validity checklist.

    Args:
        metrics: TripMetrics of the trip
        locations: ordered sequence of LocationSample
        inertial: ordered sequence of InertialSample

    Returns:
        ValidationResult with every failing check, in checklist order
    """
    errors = []

    # 1. Distance
    _check_distance(metrics, errors)

    # 2. Duration
    _check_duration(metrics, errors)

    # 3. Average speed
    _check_avg_speed(metrics, errors)

    # 4. Idle share
    _check_idle(metrics, errors)

    # 5. GPS continuity
    _check_teleport(locations, errors)

    # 6. Sensor quality
    _check_sensor_quality(inertial, errors)

    if errors:
        logger.info(f"Trip rejected: {', '.join(issue.code for issue in errors)}")

    return ValidationResult(is_valid=not errors, errors=tuple(errors))


def _issue(code, **params):
    return ValidationIssue(code=code, message=VALIDATION[code].format(**params))


def _check_distance(metrics, errors):
    """Check minimum distance."""
    min_distance = config.MIN_DISTANCE_KM
    if not metrics.distance_km >= min_distance:
        errors.append(_issue('too_short_distance', min_distance_km=min_distance))


def _check_duration(metrics, errors):
    """Check minimum duration."""
    min_duration = config.MIN_DURATION_MINUTES
    if not metrics.duration_minutes >= min_duration:
        errors.append(_issue('too_short_time', min_duration_minutes=min_duration))


def _check_avg_speed(metrics, errors):
    """Check minimum average speed."""
    min_avg_speed = config.MIN_AVG_SPEED_KMH
    if not metrics.avg_speed_kmh >= min_avg_speed:
        errors.append(_issue('low_avg_speed', min_avg_speed_kmh=min_avg_speed))


def _check_idle(metrics, errors):
    """Check share of the trip spent below moving speed."""
    # Zero-duration trips are already rejected as too short
    if metrics.duration_minutes <= 0:
        return

    idle_fraction = 1 - metrics.moving_time_minutes / metrics.duration_minutes
    if not idle_fraction <= getattr(config, 'MAX_IDLE_FRACTION', 0.3):
        errors.append(_issue('excessive_idle'))


def find_teleport_index(locations):
    """
    Find the first location whose jump from its predecessor implies an
    impossible speed.

    A positive distance covered in zero or negative elapsed time counts as a
    teleport; a repeated fix at the same timestamp does not. A pair whose
    distance is not finite (NaN or infinite coordinates) is a teleport too.

    Returns:
        int index of the later sample of the first offending pair, or None
    """
    if len(locations) < 2:
        return None

    max_speed = getattr(config, 'MAX_IMPLIED_SPEED_MS', 100.0)

    times_ms, lats, lons, _ = location_arrays(locations)
    distances_m = haversine_distances(lats, lons)
    elapsed_s = np.diff(times_ms) / MS_TO_S

    positive_dt = elapsed_s > 0
    implied_speed = np.zeros_like(distances_m)
    implied_speed[positive_dt] = distances_m[positive_dt] / elapsed_s[positive_dt]

    jumps = (
        (positive_dt & (implied_speed > max_speed))
        | (~positive_dt & (distances_m > 0))
        | ~np.isfinite(distances_m)
    )
    offending = np.flatnonzero(jumps)
    if len(offending) == 0:
        return None
    return int(offending[0]) + 1


def _check_teleport(locations, errors):
    """Check for GPS jumps; reported once no matter how many exist."""
    index = find_teleport_index(locations)
    if index is not None:
        logger.debug(f"GPS teleport at location sample {index}")
        errors.append(_issue('gps_teleport'))


def _check_sensor_quality(inertial, errors):
    """Check that motion sensors were recording."""
    if len(inertial) < config.MIN_INERTIAL_SAMPLES:
        errors.append(_issue('low_sensor_quality'))
