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
Configuration file for DriveScore.
Contains all thresholds, penalties and settings for trip scoring.

These values are part of the scoring contract: changing any of them changes
the score a given trip receives.
"""

# Physical Constants
EARTH_RADIUS_M = 6371000.0  # Mean Earth radius for haversine, m

# ============================================================
# Trip Validity Gate
# ============================================================
MIN_DISTANCE_KM = 2.0          # Minimum trip distance, km
MIN_DURATION_MINUTES = 8.0     # Minimum trip duration, min
MIN_AVG_SPEED_KMH = 12.0       # Minimum average speed, km/h
MAX_IDLE_FRACTION = 0.30       # Maximum share of duration spent not moving
MAX_IMPLIED_SPEED_MS = 100.0   # Consecutive fixes implying more than this are a GPS teleport (360 km/h)
MIN_INERTIAL_SAMPLES = 10      # Minimum inertial samples in the whole trip
MIN_MOVING_SPEED_KMH = 5.0     # A sample at or above this speed counts as moving

# ============================================================
# Event Detection
# ============================================================

# Hard braking: magnitude must stay above threshold for a run of samples
HARD_BRAKE_THRESHOLD_MS2 = 3.5      # Acceleration magnitude, m/s²
HARD_BRAKE_SUSTAIN_SAMPLES = 15     # ~300 ms at 50 Hz

# Hard acceleration: single-sample trigger
HARD_ACCEL_THRESHOLD_MS2 = 3.0      # Acceleration magnitude, m/s²
HARD_ACCEL_SKIP_SAMPLES = 10        # Samples suppressed after a hit

# Harsh cornering: yaw rate from gyroscope z axis
HARSH_CORNER_THRESHOLD_DEG_S = 25.0  # Yaw rate, deg/s
HARSH_CORNER_SKIP_SAMPLES = 10       # Samples suppressed after a hit

# Speeding: single fallback limit regardless of road type
FALLBACK_SPEED_LIMIT_KMH = 50.0
SPEEDING_BUFFER_KMH = 5.0

# ============================================================
# Penalties
# ============================================================
MAX_SCORE = 10.0
SCORE_DECIMALS = 1
DISTANCE_NORMALIZATION_KM = 10.0    # Event penalties are expressed per 10 km

PENALTY_HARD_BRAKE = 1.5            # Per event per 10 km
PENALTY_HARD_ACCEL = 1.0            # Per event per 10 km
PENALTY_HARSH_CORNER = 1.0          # Per event per 10 km
PENALTY_SPEEDING_MULTIPLIER = 6.0   # Times the speeding fraction
PENALTY_PHONE_PER_MINUTE = 0.5      # Per minute of phone interaction

PHONE_MINUTES_DECIMALS = 1          # Phone interaction minutes are rounded to this

# ============================================================
# Inertial Stream Synchronization
# ============================================================
INERTIAL_SYNC_TOLERANCE_MS = 10     # Max timestamp distance to pair accelerometer and gyroscope

# ============================================================
# Data Quality Notices (do not affect the score)
# ============================================================
LOW_LOCATION_FREQUENCY_HZ = 0.5     # Location updates below this rate
LOW_INERTIAL_FREQUENCY_HZ = 25.0    # Inertial sample rate below this
POOR_GPS_ACCURACY_M = 20.0          # Median horizontal accuracy worse than this
LOCATION_GAP_SECONDS = 5.0          # Gap between fixes reported as a log gap
MAX_LOCATION_GAPS = 10              # More gaps than this is a warning, not a caution

# ============================================================
# Visualization Parameters
# ============================================================
CHART_DPI = 120
CHART_FIGSIZE = (14, 9)
TRACK_FIGSIZE = (10, 10)
TRACK_COLORMAP = 'viridis'          # Colormap for speed along the route
TRACK_LINE_WIDTH = 3
SMOOTHING_WINDOW_LENGTH = 25        # Savitzky-Golay window for inertial traces (must be odd)
SMOOTHING_POLYORDER = 2
LEGEND_FONTSIZE = 10
EVENT_MARKER_SIZE = 60
SPEEDING_SHADE_ALPHA = 0.2
