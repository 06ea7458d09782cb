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
Helper functions shared by the scoring pipeline.
Unpack sample records into NumPy arrays and concatenate trip chunks.
"""
import math

import numpy as np

from .structures import MS_TO_KMH


def flatten_chunks(chunks):
    """
    Concatenate the sample streams of all chunks in upload order.

    Args:
        chunks: ordered sequence of TelemetryChunk

    Returns:
        tuple: (locations, inertial) as lists
    """
    locations = []
    inertial = []
    for chunk in chunks:
        locations.extend(chunk.locations)
        inertial.extend(chunk.inertial)
    return locations, inertial


def location_arrays(locations):
    """
    Unpack location samples into arrays.

    Args:
        locations: sequence of LocationSample

    Returns:
        tuple: (times_ms int64, lats, lons, speeds_kmh)
    """
    n_points = len(locations)

    # Pre-allocate arrays for location fields
    times_ms = np.empty(n_points, dtype=np.int64)
    lats = np.empty(n_points, dtype=float)
    lons = np.empty(n_points, dtype=float)
    speeds_ms = np.empty(n_points, dtype=float)

    for i, point in enumerate(locations):
        times_ms[i] = point.timestamp
        lats[i] = point.latitude
        lons[i] = point.longitude
        speeds_ms[i] = point.speed

    return times_ms, lats, lons, speeds_ms * MS_TO_KMH


def inertial_arrays(inertial):
    """
    Unpack inertial samples into arrays.

    Args:
        inertial: sequence of InertialSample

    Returns:
        tuple: (times_ms int64, acceleration (N, 3), angular_rate (N, 3))
    """
    n_samples = len(inertial)
    times_ms = np.empty(n_samples, dtype=np.int64)
    acceleration = np.empty((n_samples, 3), dtype=float)
    angular_rate = np.empty((n_samples, 3), dtype=float)

    for i, sample in enumerate(inertial):
        times_ms[i] = sample.timestamp
        acc = sample.acceleration
        gyro = sample.angular_rate
        acceleration[i] = (acc.x, acc.y, acc.z)
        angular_rate[i] = (gyro.x, gyro.y, gyro.z)

    return times_ms, acceleration, angular_rate


def acceleration_magnitudes(inertial):
    """Euclidean norm of each inertial sample's acceleration, m/s²."""
    _, acceleration, _ = inertial_arrays(inertial)
    return np.sqrt(np.sum(acceleration ** 2, axis=1))


def yaw_rates_deg(inertial):
    """Absolute z-axis angular rate of each sample, deg/s."""
    _, _, angular_rate = inertial_arrays(inertial)
    return np.degrees(np.abs(angular_rate[:, 2]))


def round_half_up(value, digits=1):
    """Round half away from zero for non-negative values (2.25 -> 2.3)."""
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor
