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
Trip metrics aggregation: distance, duration, speeds and moving time.
"""
import logging

import numpy as np

try:
    from .. import config
except ImportError:
    import config

from .geodesy import haversine_distances
from .helpers import location_arrays
from .structures import TripMetrics, MS_TO_S, MS_PER_MINUTE, SECONDS_PER_MINUTE, M_TO_KM

logger = logging.getLogger(__name__)


def calculate_trip_metrics(locations):
    """
    Aggregate the full ordered location sequence of a trip.

    Moving time only counts the interval leading up to a sample whose speed
    is at least MIN_MOVING_SPEED_KMH.

    Args:
        locations: ordered sequence of LocationSample (may be empty)

    Returns:
        TripMetrics: all zeros for fewer than two samples
    """
    if len(locations) < 2:
        logger.debug(f"Degenerate trip with {len(locations)} location samples")
        return TripMetrics()

    min_moving_speed = getattr(config, 'MIN_MOVING_SPEED_KMH', 5.0)

    times_ms, lats, lons, speeds_kmh = location_arrays(locations)

    distance_m = float(np.sum(haversine_distances(lats, lons)))
    duration_minutes = float(times_ms[-1] - times_ms[0]) / MS_PER_MINUTE

    dt_seconds = np.diff(times_ms) / MS_TO_S
    moving_mask = speeds_kmh[1:] >= min_moving_speed
    moving_time_minutes = float(np.sum(dt_seconds[moving_mask])) / SECONDS_PER_MINUTE

    return TripMetrics(
        distance_km=distance_m / M_TO_KM,
        duration_minutes=duration_minutes,
        avg_speed_kmh=float(np.mean(speeds_kmh)),
        max_speed_kmh=float(np.max(speeds_kmh)),
        moving_time_minutes=moving_time_minutes,
    )
