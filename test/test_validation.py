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

"""Tests for the trip validity gate."""
import math
import os
import sys
from dataclasses import replace

import pytest

# Add parent directory to path for imports
PARENT_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if PARENT_DIR not in sys.path:
    sys.path.insert(0, PARENT_DIR)

from core.metrics import calculate_trip_metrics
from core.structures import LocationSample, TripMetrics
from core.validation import validate_trip, find_teleport_index
from trip_factory import make_locations, make_inertial, kmh, START_MS
import config


def _validate(locations, inertial):
    return validate_trip(calculate_trip_metrics(locations), locations, inertial)


def _shift_east(point, metres):
    return replace(point, longitude=point.longitude + math.degrees(metres / config.EARTH_RADIUS_M))


def test_steady_trip_is_valid():
    result = _validate(make_locations([kmh(30)] * 1201), make_inertial(count=100))
    assert result.is_valid
    assert result.errors == ()


def test_single_sample_trip_is_too_short():
    result = _validate(make_locations([0.0]), make_inertial(count=100))

    assert not result.is_valid
    assert 'too_short_distance' in result.codes
    assert 'too_short_time' in result.codes


def test_missing_motion_sensors_only():
    result = _validate(make_locations([kmh(30)] * 1201), make_inertial(count=5))
    assert result.codes == ['low_sensor_quality']


@pytest.mark.parametrize("count,valid", [(9, False), (10, True)])
def test_minimum_inertial_samples(count, valid):
    result = _validate(make_locations([kmh(30)] * 1201), make_inertial(count=count))
    assert result.is_valid == valid


def test_mostly_idle_trip():
    # 8 minutes stationary, then 12 minutes at 60 km/h
    speeds = [0.0] * 481 + [kmh(60)] * 720
    result = _validate(make_locations(speeds), make_inertial(count=100))
    assert result.codes == ['excessive_idle']


def test_all_failing_checks_are_reported_in_order():
    # 5 minutes at 30 km/h with one GPS jump and almost no motion data
    locations = make_locations([kmh(30)] * 301)
    locations[150] = _shift_east(locations[150], 1000.0)

    result = _validate(locations, make_inertial(count=5))
    assert result.codes == ['too_short_time', 'gps_teleport', 'low_sensor_quality']


def test_teleport_between_two_samples():
    # 1000 m in 2 seconds implies 500 m/s
    first = LocationSample(latitude=0.0, longitude=0.0, speed=15.0, heading=90.0,
                           accuracy=5.0, timestamp=START_MS)
    second = replace(_shift_east(first, 1000.0), timestamp=START_MS + 2000)

    assert find_teleport_index([first, second]) == 1

    # Metrics that would otherwise pass do not matter
    metrics = TripMetrics(distance_km=10.0, duration_minutes=20.0, avg_speed_kmh=30.0,
                          max_speed_kmh=30.0, moving_time_minutes=20.0)
    result = validate_trip(metrics, [first, second], make_inertial(count=100))
    assert result.codes == ['gps_teleport']


def test_teleport_is_reported_once():
    locations = make_locations([kmh(30)] * 1201)
    for i in (100, 500, 900):
        locations[i] = _shift_east(locations[i], 5000.0)

    result = _validate(locations, make_inertial(count=100))
    assert result.codes.count('gps_teleport') == 1
    assert find_teleport_index(locations) == 100


def test_normal_driving_is_not_a_teleport():
    assert find_teleport_index(make_locations([kmh(130)] * 60)) is None


def test_movement_without_elapsed_time_is_a_teleport():
    first = LocationSample(latitude=0.0, longitude=0.0, speed=10.0, heading=90.0,
                           accuracy=5.0, timestamp=START_MS)
    second = _shift_east(first, 10.0)
    assert find_teleport_index([first, second]) == 1


def test_repeated_fix_is_not_a_teleport():
    first = LocationSample(latitude=0.0, longitude=0.0, speed=10.0, heading=90.0,
                           accuracy=5.0, timestamp=START_MS)
    assert find_teleport_index([first, first]) is None


def test_nan_coordinate_is_a_teleport():
    locations = make_locations([kmh(30)] * 20)
    locations[5] = replace(locations[5], latitude=float('nan'))
    assert find_teleport_index(locations) == 5


def test_nan_coordinate_fails_the_gate():
    locations = make_locations([kmh(30)] * 1201)
    locations[5] = replace(locations[5], latitude=float('nan'))

    result = _validate(locations, make_inertial(count=100))

    assert not result.is_valid
    assert result.codes == ['too_short_distance', 'gps_teleport']


def test_nan_speed_fails_the_gate():
    locations = make_locations([kmh(30)] * 1201)
    locations[5] = replace(locations[5], speed=float('nan'))

    result = _validate(locations, make_inertial(count=100))

    assert not result.is_valid
    assert result.codes == ['low_avg_speed']


def test_zero_duration_skips_idle_check():
    result = validate_trip(TripMetrics(), make_locations([0.0]), make_inertial(count=100))
    assert 'excessive_idle' not in result.codes


def test_messages_carry_thresholds():
    result = _validate(make_locations([0.0]), [])
    messages = {issue.code: issue.message for issue in result.errors}

    assert messages['too_short_distance'] == "Drive at least 2 km."
    assert messages['too_short_time'] == "Drive at least 8 minutes."
    assert messages['low_avg_speed'] == "Average speed must be at least 12 km/h."
    assert messages['low_sensor_quality'] == "Enable Location + Motion; keep phone stable."
