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
Telemetry chunk handler - parsing uploaded trip JSON into sample records.

Upload format (one object per chunk)::

    {
        "sessionId": "...", "chunkIndex": 0,
        "startTime": 1700000000000, "endTime": 1700000010000,
        "gpsData": [{"lat": .., "lng": .., "speed": .., "heading": ..,
                     "accuracy": .., "timestamp": ..}, ...],
        "imuData": [{"accelerometer": {"x": .., "y": .., "z": ..},
                     "gyroscope": {"x": .., "y": .., "z": ..},
                     "timestamp": ..}, ...],
        "phoneInteractionDetected": false
    }

Instead of ``imuData`` a chunk may carry the raw sensor streams
``accelerometerData`` and ``gyroscopeData`` (lists of ``{"x", "y", "z",
"timestamp"}``); they are joined by ``core.sync.merge_inertial_streams``.
"""
import json
import math
import logging
import os
import sys

# Add parent directory to path for core/locales imports
PARENT_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if PARENT_DIR not in sys.path:
    sys.path.insert(0, PARENT_DIR)

from core.structures import LocationSample, InertialSample, TelemetryChunk, Vector3
from core.sync import merge_inertial_streams
from locales.strings import ERRORS

logger = logging.getLogger('telemetry_json')


def _number(data, field, record, default=None):
    """Read a numeric field, raising ValueError if missing, not a number or not finite."""
    if field not in data or data[field] is None:
        if default is not None:
            return default
        raise ValueError(ERRORS['missing_field'].format(field=field, record=record))

    value = data[field]
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(ERRORS['invalid_number'].format(field=field, record=record, value=value))
    # json.load accepts NaN and Infinity literals
    if not math.isfinite(value):
        raise ValueError(ERRORS['non_finite_number'].format(field=field, record=record, value=value))
    return value


def _timestamp(data, record, field='timestamp'):
    value = _number(data, field, record)
    if value <= 0:
        raise ValueError(ERRORS['invalid_timestamp'].format(value=value, record=record))
    return int(value)


def _vector(data, field, record):
    vec = data.get(field)
    if not isinstance(vec, dict):
        raise ValueError(ERRORS['missing_field'].format(field=field, record=record))
    name = f"{record}.{field}"
    return Vector3(
        x=float(_number(vec, 'x', name)),
        y=float(_number(vec, 'y', name)),
        z=float(_number(vec, 'z', name)),
    )


def parse_location(data, record='gpsData'):
    """
    Parse one GPS fix.

    Args:
        data: dict with lat, lng, speed (m/s), timestamp (ms) and optional
              heading (deg) and accuracy (m)
        record: name used in error messages

    Returns:
        LocationSample
    """
    speed = _number(data, 'speed', record)
    if speed < 0:
        raise ValueError(ERRORS['invalid_speed'].format(value=speed, record=record))

    accuracy = data.get('accuracy')
    if accuracy is not None:
        accuracy = float(_number(data, 'accuracy', record))

    return LocationSample(
        latitude=float(_number(data, 'lat', record)),
        longitude=float(_number(data, 'lng', record)),
        speed=float(speed),
        heading=float(_number(data, 'heading', record, default=0.0)),
        accuracy=accuracy,
        timestamp=_timestamp(data, record),
    )


def parse_inertial(data, record='imuData'):
    """
    Parse one combined accelerometer + gyroscope sample.

    Returns:
        InertialSample
    """
    return InertialSample(
        acceleration=_vector(data, 'accelerometer', record),
        angular_rate=_vector(data, 'gyroscope', record),
        timestamp=_timestamp(data, record),
    )


def _raw_readings(entries, name):
    """Convert raw sensor stream entries into (timestamp_ms, x, y, z) tuples."""
    readings = []
    for i, entry in enumerate(entries):
        record = f"{name}[{i}]"
        readings.append((
            _timestamp(entry, record),
            float(_number(entry, 'x', record)),
            float(_number(entry, 'y', record)),
            float(_number(entry, 'z', record)),
        ))
    return readings


def parse_chunk(data, index=0):
    """
    Parse one uploaded telemetry chunk.

    Args:
        data: chunk dict in upload format
        index: position of the chunk in the trip (for error messages)

    Returns:
        TelemetryChunk
    """
    record = f"chunk {index}"
    if not isinstance(data, dict):
        raise ValueError(ERRORS['no_chunks'])

    locations = tuple(
        parse_location(point, f"{record} gpsData[{i}]")
        for i, point in enumerate(data.get('gpsData') or [])
    )

    if 'imuData' in data:
        inertial = tuple(
            parse_inertial(sample, f"{record} imuData[{i}]")
            for i, sample in enumerate(data.get('imuData') or [])
        )
    else:
        accelerometer = _raw_readings(data.get('accelerometerData') or [], f"{record} accelerometerData")
        gyroscope = _raw_readings(data.get('gyroscopeData') or [], f"{record} gyroscopeData")
        inertial = tuple(merge_inertial_streams(accelerometer, gyroscope))

    chunk_index = data.get('chunkIndex')
    return TelemetryChunk(
        locations=locations,
        inertial=inertial,
        phone_interaction=bool(data.get('phoneInteractionDetected', False)),
        start_time=_timestamp(data, record, 'startTime'),
        end_time=_timestamp(data, record, 'endTime'),
        session_id=data.get('sessionId'),
        chunk_index=int(chunk_index) if chunk_index is not None else None,
    )


def load_trip_file(file_path):
    """
    Load all telemetry chunks of a trip from a JSON file.

    Args:
        file_path: path to a JSON list of chunks, or an object with a
                   "chunks" list

    Returns:
        list of TelemetryChunk in file order
    """
    try:
        with open(file_path, 'r') as f:
            payload = json.load(f)
    except json.JSONDecodeError as e:
        raise ValueError(ERRORS['invalid_json'].format(details=e)) from e

    if isinstance(payload, dict):
        payload = payload.get('chunks')
    if not isinstance(payload, list):
        raise ValueError(ERRORS['no_chunks'])

    chunks = [parse_chunk(item, i) for i, item in enumerate(payload)]
    logger.info(f"Loaded {len(chunks)} chunks from {os.path.basename(file_path)}")
    return chunks


def _first_out_of_order(timestamps):
    for i in range(1, len(timestamps)):
        if timestamps[i] < timestamps[i - 1]:
            return i
    return None


def check_chronological_order(chunks):
    """
    Fail fast if chunks or the samples inside them are out of order.

    Equal timestamps are allowed. The scoring engine itself assumes order
    and does not re-sort.

    Raises:
        ValueError: describing the first violation found
    """
    previous_start = None
    for index, chunk in enumerate(chunks):
        if previous_start is not None and chunk.start_time < previous_start:
            raise ValueError(ERRORS['chunk_out_of_order'].format(index=index))
        previous_start = chunk.start_time

        for stream, samples in (('Location', chunk.locations), ('Inertial', chunk.inertial)):
            sample = _first_out_of_order([s.timestamp for s in samples])
            if sample is not None:
                raise ValueError(ERRORS['samples_out_of_order'].format(
                    stream=stream, index=index, sample=sample
                ))

    # Samples must also continue across chunk boundaries
    for stream, attr in (('Location', 'locations'), ('Inertial', 'inertial')):
        last_timestamp = None
        for index, chunk in enumerate(chunks):
            samples = getattr(chunk, attr)
            if not samples:
                continue
            if last_timestamp is not None and samples[0].timestamp < last_timestamp:
                raise ValueError(ERRORS['samples_out_of_order'].format(
                    stream=stream, index=index, sample=0
                ))
            last_timestamp = samples[-1].timestamp
