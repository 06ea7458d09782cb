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
Driving event detectors.

Inertial detectors share one scan: a boolean trigger array is walked once and
every hit moves a resume index forward, so one sustained manoeuvre is not
counted several times under sensor jitter. The detectors only ever see trips
that passed the validity gate.
"""
import logging
from dataclasses import dataclass

import numpy as np

try:
    from .. import config
except ImportError:
    import config

from .helpers import (
    acceleration_magnitudes,
    yaw_rates_deg,
    location_arrays,
    round_half_up,
)
from .structures import MS_TO_S, MS_PER_MINUTE

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SpeedingResult:
    fraction: float         # share of elapsed time spent speeding, 0..1
    speeding_seconds: float
    total_seconds: float


def scan_with_resume(triggered, resume_offset):
    """
    Walk a trigger array once, suppressing re-triggers after each hit.

    Args:
        triggered: boolean array, True where the event condition holds
        resume_offset: after a hit at index i, scanning resumes at i + resume_offset

    Returns:
        list of int: indices of the recorded events
    """
    if resume_offset < 1:
        raise ValueError(f"resume_offset must be at least 1, got {resume_offset}")

    events = []
    resume_index = 0
    for i in np.flatnonzero(triggered):
        if i < resume_index:
            continue
        events.append(int(i))
        resume_index = i + resume_offset
    return events


def sustained_mask(triggered, run_length):
    """
    Mark indices that start a run of at least run_length True values.

    Args:
        triggered: boolean array
        run_length: required number of consecutive True samples

    Returns:
        np.ndarray of bool, same length as triggered
    """
    triggered = np.asarray(triggered, dtype=bool)
    n = len(triggered)
    sustained = np.zeros(n, dtype=bool)
    if run_length < 1 or n < run_length:
        return sustained

    # Window sums via cumulative count of True values
    counts = np.concatenate(([0], np.cumsum(triggered, dtype=np.int64)))
    window_sums = counts[run_length:] - counts[:-run_length]
    sustained[:n - run_length + 1] = window_sums == run_length
    return sustained


def detect_hard_braking(inertial):
    """
    Hard braking: acceleration magnitude above threshold for a sustained run.

    One event per run; the sample right after the confirming run is skipped
    as well, so scanning resumes at i + run_length + 1.

    Returns:
        list of int: inertial sample indices where events start
    """
    if not inertial:
        return []

    threshold = config.HARD_BRAKE_THRESHOLD_MS2
    run_length = getattr(config, 'HARD_BRAKE_SUSTAIN_SAMPLES', 15)

    over_threshold = acceleration_magnitudes(inertial) > threshold
    events = scan_with_resume(sustained_mask(over_threshold, run_length), run_length + 1)

    logger.debug(f"Hard braking events: {len(events)}")
    return events


def detect_hard_acceleration(inertial):
    """
    Hard acceleration: acceleration magnitude above threshold at one sample.

    Returns:
        list of int: inertial sample indices of events
    """
    if not inertial:
        return []

    threshold = config.HARD_ACCEL_THRESHOLD_MS2
    skip = getattr(config, 'HARD_ACCEL_SKIP_SAMPLES', 10)

    triggered = acceleration_magnitudes(inertial) > threshold
    events = scan_with_resume(triggered, skip + 1)

    logger.debug(f"Hard acceleration events: {len(events)}")
    return events


def detect_harsh_cornering(inertial):
    """
    Harsh cornering: absolute gyroscope z rate above threshold (deg/s).

    Returns:
        list of int: inertial sample indices of events
    """
    if not inertial:
        return []

    threshold = config.HARSH_CORNER_THRESHOLD_DEG_S
    skip = getattr(config, 'HARSH_CORNER_SKIP_SAMPLES', 10)

    triggered = yaw_rates_deg(inertial) > threshold
    events = scan_with_resume(triggered, skip + 1)

    logger.debug(f"Harsh cornering events: {len(events)}")
    return events


def speeding_mask(locations, speed_limit_kmh=None):
    """
    Flag each consecutive location pair whose later sample is over the limit.

    Args:
        locations: ordered sequence of LocationSample
        speed_limit_kmh: posted limit (default: config.FALLBACK_SPEED_LIMIT_KMH)

    Returns:
        np.ndarray of bool with one entry per pair (N-1)
    """
    if len(locations) < 2:
        return np.zeros(0, dtype=bool)

    if speed_limit_kmh is None:
        speed_limit_kmh = config.FALLBACK_SPEED_LIMIT_KMH
    buffer_kmh = getattr(config, 'SPEEDING_BUFFER_KMH', 5.0)

    _, _, _, speeds_kmh = location_arrays(locations)
    return speeds_kmh[1:] > speed_limit_kmh + buffer_kmh


def detect_speeding(locations, speed_limit_kmh=None):
    """
    Share of elapsed trip time spent above the speed limit plus buffer.

    Args:
        locations: ordered sequence of LocationSample
        speed_limit_kmh: posted limit (default: config.FALLBACK_SPEED_LIMIT_KMH)

    Returns:
        SpeedingResult
    """
    if len(locations) < 2:
        return SpeedingResult(fraction=0.0, speeding_seconds=0.0, total_seconds=0.0)

    times_ms, _, _, _ = location_arrays(locations)
    elapsed_s = np.diff(times_ms) / MS_TO_S

    over_limit = speeding_mask(locations, speed_limit_kmh)
    total_seconds = float(np.sum(elapsed_s))
    speeding_seconds = float(np.sum(elapsed_s[over_limit]))

    fraction = speeding_seconds / total_seconds if total_seconds > 0 else 0.0

    logger.debug(f"Speeding {speeding_seconds:.0f}s of {total_seconds:.0f}s")
    return SpeedingResult(
        fraction=fraction,
        speeding_seconds=speeding_seconds,
        total_seconds=total_seconds,
    )


def calculate_phone_interaction(chunks):
    """
    Minutes covered by chunks in which phone interaction was observed.

    Args:
        chunks: sequence of TelemetryChunk

    Returns:
        float: minutes, rounded to PHONE_MINUTES_DECIMALS
    """
    decimals = getattr(config, 'PHONE_MINUTES_DECIMALS', 1)

    interaction_ms = sum(
        chunk.end_time - chunk.start_time
        for chunk in chunks
        if chunk.phone_interaction
    )
    return round_half_up(interaction_ms / MS_PER_MINUTE, decimals)
