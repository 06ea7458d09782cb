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
Data quality notices.
Single point for warning logic; notices never change the score.
"""

import logging

import numpy as np

try:
    from .. import config
    from ..locales.strings import WARNINGS, CAUTIONS
except ImportError:
    import config
    from locales.strings import WARNINGS, CAUTIONS

from .helpers import location_arrays, inertial_arrays
from .structures import MS_TO_S

logger = logging.getLogger(__name__)


def compute_warnings(locations, inertial):
    """
    Unified function for computing all data quality notices.

    Args:
        locations: ordered sequence of LocationSample
        inertial: ordered sequence of InertialSample

    Returns:
        tuple: (warnings: dict, cautions: dict)
    """
    warnings = {}
    cautions = {}

    # 1. Location update rate
    _check_location_frequency(locations, warnings, cautions)

    # 2. Motion sensor rate
    _check_inertial_frequency(inertial, warnings, cautions)

    # 3. GPS accuracy
    _check_gps_accuracy(locations, warnings, cautions)

    # 4. Gaps in the location log
    _check_location_gaps(locations, warnings, cautions)

    return warnings, cautions


def sample_frequency(times_ms):
    """
    Mean sample rate from timestamps in ms.

    Returns:
        float in Hz, or None if it cannot be determined
    """
    if len(times_ms) < 2:
        return None
    intervals = np.diff(np.asarray(times_ms, dtype=np.int64))
    intervals = intervals[intervals > 0]
    if len(intervals) == 0:
        return None
    return float(MS_TO_S / np.mean(intervals))


def _check_location_frequency(locations, warnings, cautions):
    """Check location update rate."""
    if len(locations) < 2:
        return

    times_ms, _, _, _ = location_arrays(locations)
    freq = sample_frequency(times_ms)
    threshold = getattr(config, 'LOW_LOCATION_FREQUENCY_HZ', 0.5)

    if freq is not None and freq < threshold:
        cautions['location_frequency'] = CAUTIONS['location_frequency'].format(
            freq=freq, threshold=threshold
        )


def _check_inertial_frequency(inertial, warnings, cautions):
    """Check motion sensor sample rate."""
    if len(inertial) < 2:
        return

    times_ms, _, _ = inertial_arrays(inertial)
    freq = sample_frequency(times_ms)
    threshold = getattr(config, 'LOW_INERTIAL_FREQUENCY_HZ', 25.0)

    if freq is not None and freq < threshold:
        cautions['inertial_frequency'] = CAUTIONS['inertial_frequency'].format(
            freq=freq, threshold=threshold
        )


def _check_gps_accuracy(locations, warnings, cautions):
    """Check median horizontal accuracy."""
    accuracies = [point.accuracy for point in locations if point.accuracy is not None and point.accuracy > 0]
    if not accuracies:
        return

    median_accuracy = float(np.median(accuracies))
    threshold = getattr(config, 'POOR_GPS_ACCURACY_M', 20.0)

    if median_accuracy > threshold:
        cautions['gps_accuracy'] = CAUTIONS['gps_accuracy'].format(
            accuracy=median_accuracy, threshold=threshold
        )


def find_location_gaps(locations, gap_seconds=None):
    """
    Find pauses in the location log.

    Returns:
        list of dict: {'index', 'duration', 'time_before', 'time_after'}
    """
    if gap_seconds is None:
        gap_seconds = getattr(config, 'LOCATION_GAP_SECONDS', 5.0)
    if len(locations) < 2:
        return []

    times_ms, _, _, _ = location_arrays(locations)
    elapsed_s = np.diff(times_ms) / MS_TO_S

    gaps = []
    for i in np.flatnonzero(elapsed_s > gap_seconds):
        gaps.append({
            'index': int(i) + 1,
            'duration': float(elapsed_s[i]),
            'time_before': int(times_ms[i]),
            'time_after': int(times_ms[i + 1]),
        })
    return gaps


def _check_location_gaps(locations, warnings, cautions):
    """Check for gaps in location data."""
    gaps = find_location_gaps(locations)
    if not gaps:
        return

    gap_count = len(gaps)
    if gap_count > getattr(config, 'MAX_LOCATION_GAPS', 10):
        warnings['log_issue'] = WARNINGS['log_issue'].format(count=gap_count)
    else:
        cautions['log_issue'] = CAUTIONS['log_issue'].format(count=gap_count)
