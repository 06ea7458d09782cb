#!/usr/bin/env python3
# DriveScore - driver safety telemetry scoring engine
# Copyright (C) 2024 DriveScore Contributors
#
# Shared record definitions and unit constants used across the scoring
# pipeline. All records are frozen so a trip handed to the engine can never
# be modified by it.

"""
Core records used in the DriveScore pipeline.

Input records
-------------
``LocationSample`` and ``InertialSample`` are produced by the phone at roughly
1 Hz and 50 Hz. ``TelemetryChunk`` is the upload unit: a short window of both
streams plus a phone-interaction flag. A trip is the ordered sequence of its
chunks.

Output records
--------------
``TripMetrics``, ``ValidationResult``, ``ScoreBreakdown``, ``EventCounts``
and ``SafetyScoreResult`` are returned by ``core.calculator``.
``TripSummary`` is returned by ``core.summary``.
"""
from dataclasses import dataclass, field, asdict
from typing import Optional, Tuple

# Unit conversion constants
MS_TO_KMH = 3.6  # m/s to km/h conversion factor
MS_TO_S = 1000.0  # milliseconds to seconds conversion factor
MS_PER_MINUTE = 60000.0  # milliseconds in a minute
SECONDS_PER_MINUTE = 60.0
M_TO_KM = 1000.0  # metres in a kilometre
PERCENT = 100.0

# Category keys, in the fixed order used for tie-breaking
CATEGORY_HARD_BRAKES = 'hard_brakes'
CATEGORY_HARD_ACCELERATIONS = 'hard_accelerations'
CATEGORY_HARSH_CORNERS = 'harsh_corners'
CATEGORY_SPEEDING = 'speeding_time'
CATEGORY_PHONE = 'phone_interaction'

CATEGORY_ORDER = (
    CATEGORY_HARD_BRAKES,
    CATEGORY_HARD_ACCELERATIONS,
    CATEGORY_HARSH_CORNERS,
    CATEGORY_SPEEDING,
    CATEGORY_PHONE,
)


@dataclass(frozen=True)
class LocationSample:
    """One GPS fix."""
    latitude: float
    longitude: float
    speed: float        # m/s
    heading: float      # degrees
    accuracy: float     # horizontal accuracy, m
    timestamp: int      # ms from epoch


@dataclass(frozen=True)
class Vector3:
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0


@dataclass(frozen=True)
class InertialSample:
    """One accelerometer + gyroscope reading."""
    acceleration: Vector3   # m/s²
    angular_rate: Vector3   # rad/s
    timestamp: int          # ms from epoch


@dataclass(frozen=True)
class TelemetryChunk:
    locations: Tuple[LocationSample, ...]
    inertial: Tuple[InertialSample, ...]
    phone_interaction: bool
    start_time: int
    end_time: int
    session_id: Optional[str] = None
    chunk_index: Optional[int] = None


@dataclass(frozen=True)
class TripMetrics:
    distance_km: float = 0.0
    duration_minutes: float = 0.0
    avg_speed_kmh: float = 0.0
    max_speed_kmh: float = 0.0
    moving_time_minutes: float = 0.0


@dataclass(frozen=True)
class ValidationIssue:
    code: str
    message: str


@dataclass(frozen=True)
class ValidationResult:
    is_valid: bool
    errors: Tuple[ValidationIssue, ...] = ()

    @property
    def codes(self):
        return [issue.code for issue in self.errors]


@dataclass(frozen=True)
class ScoreBreakdown:
    """Penalty points deducted per category."""
    hard_brakes: float = 0.0
    hard_accelerations: float = 0.0
    harsh_corners: float = 0.0
    speeding_time: float = 0.0
    phone_interaction: float = 0.0

    def total(self):
        return sum(penalty for _, penalty in self.as_ordered_items())

    def as_ordered_items(self):
        """Return (category, penalty) pairs in CATEGORY_ORDER."""
        return [(category, getattr(self, category)) for category in CATEGORY_ORDER]


@dataclass(frozen=True)
class EventCounts:
    hard_brake_count: int = 0
    hard_accel_count: int = 0
    harsh_corner_count: int = 0
    speeding_percentage: int = 0
    phone_use_minutes: float = 0.0


@dataclass(frozen=True)
class SafetyScoreResult:
    total_score: float
    breakdown: ScoreBreakdown
    events: EventCounts
    trip_metrics: TripMetrics
    validation: ValidationResult
    event_indices: dict = field(default_factory=dict, compare=False, repr=False)

    @property
    def is_valid(self):
        return self.validation.is_valid

    @property
    def validation_errors(self):
        return list(self.validation.errors)

    def to_dict(self):
        """Plain-dict form for JSON output."""
        return {
            'total_score': self.total_score,
            'score_breakdown': asdict(self.breakdown),
            'events': asdict(self.events),
            'trip_metrics': asdict(self.trip_metrics),
            'is_valid': self.is_valid,
            'validation_errors': [asdict(issue) for issue in self.validation.errors],
        }


@dataclass(frozen=True)
class TripSummary:
    summary: str
    recommendation: str
    primary_category: str
