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

"""Tests for data quality notices."""
import os
import sys
from dataclasses import replace

import pytest

# Add parent directory to path for imports
PARENT_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if PARENT_DIR not in sys.path:
    sys.path.insert(0, PARENT_DIR)

from core.warnings import compute_warnings, find_location_gaps, sample_frequency
from trip_factory import make_locations, make_inertial, kmh, START_MS


def _with_gaps(locations, gap_count, gap_ms=10000):
    """Shift every later sample so that gap_count pauses appear in the log."""
    step = len(locations) // (gap_count + 1)
    shifted = []
    for i, point in enumerate(locations):
        offset = min(i // step, gap_count) * gap_ms
        shifted.append(replace(point, timestamp=point.timestamp + offset))
    return shifted


def test_clean_trip_has_no_notices():
    warnings, cautions = compute_warnings(make_locations([kmh(30)] * 600), make_inertial(count=500))
    assert warnings == {}
    assert cautions == {}


def test_sample_frequency():
    assert sample_frequency([0, 20, 40, 60]) == pytest.approx(50.0)
    assert sample_frequency([0]) is None
    assert sample_frequency([100, 100]) is None


def test_slow_location_updates():
    locations = make_locations([kmh(30)] * 100, interval_ms=3000)
    _, cautions = compute_warnings(locations, make_inertial(count=500))
    assert 'location_frequency' in cautions


def test_slow_motion_sensors():
    inertial = make_inertial(count=500, interval_ms=100)
    _, cautions = compute_warnings(make_locations([kmh(30)] * 600), inertial)
    assert 'inertial_frequency' in cautions
    assert '10.0 Hz' in cautions['inertial_frequency']


def test_poor_gps_accuracy():
    locations = make_locations([kmh(30)] * 600, accuracy=35.0)
    _, cautions = compute_warnings(locations, make_inertial(count=500))
    assert cautions['gps_accuracy'] == "Median GPS accuracy is 35 m (worse than 20 m)"


def test_find_location_gaps():
    locations = _with_gaps(make_locations([kmh(30)] * 100), 2)
    gaps = find_location_gaps(locations)

    assert len(gaps) == 2
    assert gaps[0]['index'] == 33
    assert gaps[0]['duration'] == pytest.approx(11.0)


def test_gap_threshold_is_exclusive():
    locations = make_locations([kmh(30)] * 10, interval_ms=5000)
    assert find_location_gaps(locations) == []


def test_few_gaps_are_a_caution():
    locations = _with_gaps(make_locations([kmh(30)] * 600), 3)
    warnings, cautions = compute_warnings(locations, make_inertial(count=500))

    assert 'log_issue' not in warnings
    assert cautions['log_issue'] == "3 gaps in location data"


def test_many_gaps_are_a_warning():
    locations = _with_gaps(make_locations([kmh(30)] * 600), 11)
    warnings, cautions = compute_warnings(locations, make_inertial(count=500))

    assert 'log_issue' not in cautions
    assert '11 gaps' in warnings['log_issue']


def test_empty_trip_has_no_notices():
    assert compute_warnings([], []) == ({}, {})
