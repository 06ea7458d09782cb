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
Great-circle distance helpers.
"""
import math

import numpy as np

try:
    from .. import config
except ImportError:
    import config


def haversine_distance(lat1, lon1, lat2, lon2):
    """
    Calculate great-circle distance between two GPS coordinates.

    Args:
        lat1: Latitude of first point (degrees)
        lon1: Longitude of first point (degrees)
        lat2: Latitude of second point (degrees)
        lon2: Longitude of second point (degrees)

    Returns:
        float: Distance in metres
    """
    radius = getattr(config, 'EARTH_RADIUS_M', 6371000.0)

    dlat_rad = math.radians(lat2 - lat1)
    dlon_rad = math.radians(lon2 - lon1)

    a = (math.sin(dlat_rad / 2) ** 2 +
         math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) *
         math.sin(dlon_rad / 2) ** 2)
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return radius * c


def haversine_distances(lats, lons):
    """
    Vectorized haversine between consecutive points of a track.

    Args:
        lats: sequence of latitudes (degrees)
        lons: sequence of longitudes (degrees)

    Returns:
        np.ndarray: N-1 distances in metres (empty for fewer than 2 points)
    """
    lats = np.asarray(lats, dtype=float)
    lons = np.asarray(lons, dtype=float)
    if len(lats) < 2:
        return np.zeros(0, dtype=float)

    radius = getattr(config, 'EARTH_RADIUS_M', 6371000.0)

    dlat_rad = np.radians(np.diff(lats))
    dlon_rad = np.radians(np.diff(lons))
    lat_rad = np.radians(lats)

    a = (np.sin(dlat_rad / 2) ** 2 +
         np.cos(lat_rad[:-1]) * np.cos(lat_rad[1:]) * np.sin(dlon_rad / 2) ** 2)
    # Rounding can push a marginally outside [0, 1] for antipodal points
    a = np.clip(a, 0.0, 1.0)
    c = 2 * np.arctan2(np.sqrt(a), np.sqrt(1 - a))

    return radius * c
