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
Accelerometer / gyroscope stream synchronization.

Phones deliver the two motion sensors as independent ~50 Hz streams. This
module joins them into InertialSample records by nearest timestamp.
"""
import logging

import numpy as np

try:
    from .. import config
except ImportError:
    import config

from .structures import InertialSample, Vector3

logger = logging.getLogger(__name__)

# Indices for elements of raw sensor reading tuples (timestamp_ms, x, y, z)
READING_TIMESTAMP = 0
READING_X = 1
READING_Y = 2
READING_Z = 3


def _vector(reading):
    return Vector3(
        x=float(reading[READING_X]),
        y=float(reading[READING_Y]),
        z=float(reading[READING_Z]),
    )


def _nearest_index(sorted_times, timestamp):
    """Index of the value in sorted_times closest to timestamp (ties go left)."""
    pos = int(np.searchsorted(sorted_times, timestamp))
    if pos == 0:
        return 0
    if pos == len(sorted_times):
        return pos - 1
    if timestamp - sorted_times[pos - 1] <= sorted_times[pos] - timestamp:
        return pos - 1
    return pos


def merge_inertial_streams(accelerometer, gyroscope, tolerance_ms=None):
    """
    Join accelerometer and gyroscope readings into inertial samples.

    Each accelerometer reading is paired with the nearest unused gyroscope
    reading strictly closer than tolerance_ms. A reading left without a
    counterpart is kept, with a zero vector for the missing channel.

    Args:
        accelerometer: sequence of (timestamp_ms, x, y, z) in m/s², chronological
        gyroscope: sequence of (timestamp_ms, x, y, z) in rad/s, chronological
        tolerance_ms: pairing window (default: config.INERTIAL_SYNC_TOLERANCE_MS)

    Returns:
        list of InertialSample sorted by timestamp
    """
    if tolerance_ms is None:
        tolerance_ms = getattr(config, 'INERTIAL_SYNC_TOLERANCE_MS', 10)

    gyro_times = np.array([reading[READING_TIMESTAMP] for reading in gyroscope], dtype=np.int64)
    gyro_used = np.zeros(len(gyroscope), dtype=bool)

    merged = []
    unmatched_accel = 0
    for reading in accelerometer:
        timestamp = int(reading[READING_TIMESTAMP])
        angular_rate = Vector3()

        if len(gyro_times) > 0:
            j = _nearest_index(gyro_times, timestamp)
            if not gyro_used[j] and abs(int(gyro_times[j]) - timestamp) < tolerance_ms:
                gyro_used[j] = True
                angular_rate = _vector(gyroscope[j])
            else:
                unmatched_accel += 1
        else:
            unmatched_accel += 1

        merged.append(InertialSample(
            acceleration=_vector(reading),
            angular_rate=angular_rate,
            timestamp=timestamp,
        ))

    for j in np.flatnonzero(~gyro_used):
        reading = gyroscope[j]
        merged.append(InertialSample(
            acceleration=Vector3(),
            angular_rate=_vector(reading),
            timestamp=int(reading[READING_TIMESTAMP]),
        ))

    unmatched_gyro = int(np.sum(~gyro_used))
    if unmatched_accel or unmatched_gyro:
        logger.debug(
            f"Inertial sync: {unmatched_accel} accelerometer and "
            f"{unmatched_gyro} gyroscope readings without counterpart"
        )

    # Stable sort keeps accelerometer-led samples ahead on equal timestamps
    merged.sort(key=lambda sample: sample.timestamp)
    return merged
