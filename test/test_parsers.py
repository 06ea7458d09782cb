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

"""Tests for telemetry chunk JSON parsing."""
import json
import os
import sys
from dataclasses import replace

import pytest

# Add parent directory to path for imports
PARENT_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if PARENT_DIR not in sys.path:
    sys.path.insert(0, PARENT_DIR)

from core.structures import Vector3
from parsers import (
    parse_location,
    parse_inertial,
    parse_chunk,
    load_trip_file,
    check_chronological_order,
)
from trip_factory import steady_trip, to_upload_dict, START_MS

GPS_POINT = {
    'lat': 55.75, 'lng': 37.61, 'speed': 12.5, 'heading': 180.0,
    'accuracy': 4.0, 'timestamp': START_MS,
}


def _write(tmp_path, payload, name='trip.json'):
    path = tmp_path / name
    path.write_text(json.dumps(payload))
    return str(path)


def _chunk_dict(start_ms=START_MS, **extra):
    data = {
        'startTime': start_ms,
        'endTime': start_ms + 10000,
        'gpsData': [dict(GPS_POINT, timestamp=start_ms)],
        'imuData': [],
        'phoneInteractionDetected': False,
    }
    data.update(extra)
    return data


def test_parse_location():
    point = parse_location(GPS_POINT)

    assert point.latitude == 55.75
    assert point.longitude == 37.61
    assert point.speed == 12.5
    assert point.heading == 180.0
    assert point.accuracy == 4.0
    assert point.timestamp == START_MS


def test_parse_location_optional_fields():
    data = {k: v for k, v in GPS_POINT.items() if k not in ('heading', 'accuracy')}
    point = parse_location(data)

    assert point.heading == 0.0
    assert point.accuracy is None


@pytest.mark.parametrize("field,value", [
    ('lat', None),
    ('lng', 'east'),
    ('speed', -1.0),
    ('speed', True),
    ('timestamp', 0),
])
def test_parse_location_rejects_bad_values(field, value):
    data = dict(GPS_POINT)
    data[field] = value
    with pytest.raises(ValueError):
        parse_location(data)


@pytest.mark.parametrize("field,value", [
    ('lat', float('nan')),
    ('lng', float('inf')),
    ('speed', float('nan')),
    ('speed', float('inf')),
    ('accuracy', float('-inf')),
    ('timestamp', float('nan')),
])
def test_parse_location_rejects_non_finite_values(field, value):
    data = dict(GPS_POINT)
    data[field] = value
    with pytest.raises(ValueError, match='finite number'):
        parse_location(data)


def test_parse_inertial_rejects_non_finite_axis():
    with pytest.raises(ValueError, match="'z' in imuData.gyroscope"):
        parse_inertial({
            'accelerometer': {'x': 0.0, 'y': 0.0, 'z': 9.8},
            'gyroscope': {'x': 0.0, 'y': 0.0, 'z': float('nan')},
            'timestamp': START_MS,
        })


def test_parse_location_missing_field_message():
    data = dict(GPS_POINT)
    del data['lng']
    with pytest.raises(ValueError, match="Missing required field 'lng'"):
        parse_location(data, 'chunk 0 gpsData[3]')


def test_parse_inertial():
    sample = parse_inertial({
        'accelerometer': {'x': 0.1, 'y': -0.2, 'z': 9.8},
        'gyroscope': {'x': 0.0, 'y': 0.01, 'z': 0.3},
        'timestamp': START_MS,
    })

    assert sample.acceleration == Vector3(0.1, -0.2, 9.8)
    assert sample.angular_rate == Vector3(0.0, 0.01, 0.3)
    assert sample.timestamp == START_MS


def test_parse_inertial_requires_both_sensors():
    with pytest.raises(ValueError, match='gyroscope'):
        parse_inertial({'accelerometer': {'x': 0, 'y': 0, 'z': 0}, 'timestamp': START_MS})


def test_parse_chunk_metadata():
    chunk = parse_chunk(_chunk_dict(sessionId='abc', chunkIndex=4, phoneInteractionDetected=True))

    assert chunk.session_id == 'abc'
    assert chunk.chunk_index == 4
    assert chunk.phone_interaction is True
    assert chunk.end_time - chunk.start_time == 10000
    assert len(chunk.locations) == 1
    assert chunk.inertial == ()


def test_parse_chunk_requires_time_window():
    data = _chunk_dict()
    del data['endTime']
    with pytest.raises(ValueError, match='endTime'):
        parse_chunk(data)


def test_parse_chunk_merges_raw_sensor_streams():
    data = _chunk_dict()
    del data['imuData']
    data['accelerometerData'] = [
        {'x': 1.0, 'y': 0.0, 'z': 0.0, 'timestamp': START_MS},
        {'x': 2.0, 'y': 0.0, 'z': 0.0, 'timestamp': START_MS + 20},
    ]
    data['gyroscopeData'] = [
        {'x': 0.0, 'y': 0.0, 'z': 0.4, 'timestamp': START_MS + 2},
    ]

    chunk = parse_chunk(data)

    assert len(chunk.inertial) == 2
    assert chunk.inertial[0].angular_rate == Vector3(0.0, 0.0, 0.4)
    assert chunk.inertial[1].angular_rate == Vector3()


def test_load_trip_file_matches_source_chunks(tmp_path):
    chunks = steady_trip(minutes=10)
    path = _write(tmp_path, [to_upload_dict(c) for c in chunks])

    assert load_trip_file(path) == chunks


def test_load_trip_file_accepts_wrapped_chunks(tmp_path):
    path = _write(tmp_path, {'chunks': [_chunk_dict(), _chunk_dict(START_MS + 10000)]})
    assert len(load_trip_file(path)) == 2


@pytest.mark.parametrize("payload", [{'data': []}, 'chunks', 42])
def test_load_trip_file_rejects_other_layouts(tmp_path, payload):
    with pytest.raises(ValueError, match='list of telemetry chunks'):
        load_trip_file(_write(tmp_path, payload))


def test_load_trip_file_rejects_invalid_json(tmp_path):
    path = tmp_path / 'broken.json'
    path.write_text('[{"startTime": ')
    with pytest.raises(ValueError, match='not valid JSON'):
        load_trip_file(str(path))


def test_load_trip_file_rejects_nan_literal(tmp_path):
    uploads = [to_upload_dict(c) for c in steady_trip(minutes=10)]
    uploads[0]['gpsData'][5]['lat'] = float('nan')
    path = _write(tmp_path, uploads)

    # json.dumps writes the bare NaN token, which json.load reads back
    with open(path) as f:
        assert 'NaN' in f.read()
    with pytest.raises(ValueError, match=r"'lat' in chunk 0 gpsData\[5\]"):
        load_trip_file(path)


def test_ordered_trip_passes_check():
    check_chronological_order(steady_trip(minutes=10))


def test_equal_timestamps_pass_check():
    chunks = steady_trip(minutes=10)
    first = chunks[0]
    repeated = replace(first, locations=(first.locations[0],) + first.locations)
    check_chronological_order([repeated] + chunks[1:])


def test_chunks_out_of_order():
    chunks = steady_trip(minutes=10)
    with pytest.raises(ValueError, match='Chunk 1 starts before'):
        check_chronological_order([chunks[1], chunks[0]])


def test_samples_out_of_order_within_chunk():
    chunks = steady_trip(minutes=10)
    first = chunks[0]
    shuffled = replace(first, locations=(first.locations[1], first.locations[0]) + first.locations[2:])
    with pytest.raises(ValueError, match='Location samples out of chronological order in chunk 0'):
        check_chronological_order([shuffled] + chunks[1:])


def test_samples_out_of_order_across_chunks():
    chunks = steady_trip(minutes=10)
    # Second chunk starts with a fix from the first minute
    second = replace(chunks[1], locations=(chunks[0].locations[5],) + chunks[1].locations)
    with pytest.raises(ValueError, match='chunk 1 at sample 0'):
        check_chronological_order([chunks[0], second] + chunks[2:])
