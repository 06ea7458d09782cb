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
Localization strings for DriveScore.
English dictionary for driver-facing and CLI messages.
"""

# Error messages (CLI and telemetry file parsing)
ERRORS = {
    'file_not_found': "File not found: {file_path}",
    'invalid_json': "Trip file is not valid JSON: {details}",
    'no_chunks': "Trip file must contain a list of telemetry chunks",
    'missing_field': "Missing required field '{field}' in {record}",
    'invalid_number': "Field '{field}' in {record} must be a number, got {value!r}",
    'non_finite_number': "Field '{field}' in {record} must be a finite number, got {value!r}",
    'invalid_timestamp': "Invalid timestamp {value!r} in {record}",
    'invalid_speed': "Invalid speed {value!r} in {record}",
    'chunk_out_of_order': "Chunk {index} starts before the previous chunk",
    'samples_out_of_order': "{stream} samples out of chronological order in chunk {index} at sample {sample}",
    'chart_failed': "Failed to create trip charts",
}

# Validity gate reasons, keyed by failure code
VALIDATION = {
    'too_short_distance': "Drive at least {min_distance_km:g} km.",
    'too_short_time': "Drive at least {min_duration_minutes:g} minutes.",
    'low_avg_speed': "Average speed must be at least {min_avg_speed_kmh:g} km/h.",
    'excessive_idle': "Trip mostly stationary; try a normal moving trip.",
    'gps_teleport': "GPS jumped; wait for stable signal before starting.",
    'low_sensor_quality': "Enable Location + Motion; keep phone stable.",
}

# Coaching tips, keyed by penalty category
TIPS = {
    'hard_brakes': "Reduce hard braking by maintaining a safe following distance and anticipating stops.",
    'hard_accelerations': "Apply throttle gently and accelerate smoothly for better safety scores.",
    'harsh_corners': "Slow down before turns and navigate corners smoothly.",
    'speeding_time': "Respect speed limits with a small buffer for better scores.",
    'phone_interaction': "Keep your phone in Do Not Disturb mode while driving.",
}

SUMMARY = {
    'summary': (
        "Trip summary: Score {score:g}/10 • Distance {distance_km:.1f} km • "
        "Duration {duration_minutes} min • Events HB {hard_brakes}, HA {hard_accels}, "
        "HC {harsh_corners} • Speeding {speeding_percentage}% • Phone use {phone_minutes:g} min."
    ),
    'recommendation': "Recommendation: {tip}",
}

# Warnings - serious data quality problems (score still computed)
WARNINGS = {
    'log_issue': "Telemetry log integrity problem: {count} gaps in location data",
}

# Cautions - minor remarks
CAUTIONS = {
    'location_frequency': "Location update rate ({freq:.2f} Hz) is below {threshold:g} Hz",
    'inertial_frequency': "Motion sensor rate ({freq:.1f} Hz) is below {threshold:g} Hz; events may be missed",
    'gps_accuracy': "Median GPS accuracy is {accuracy:.0f} m (worse than {threshold:g} m)",
    'log_issue': "{count} gaps in location data",
}

# Axis labels and chart titles
LABELS = {
    'speed_chart_title': "Speed profile",
    'inertial_chart_title': "Motion sensors",
    'track_title': "Route",
    'time_axis': "Time (min)",
    'speed_axis': "Speed (km/h)",
    'acceleration_axis': "Acceleration (m/s²)",
    'yaw_axis': "Yaw rate (deg/s)",
    'speed_colorbar': "Speed (km/h)",
    'latitude_axis': "Latitude",
    'longitude_axis': "Longitude",

    'speed': "Speed",
    'speed_limit': "Speeding threshold",
    'speeding': "Speeding",
    'acceleration': "Acceleration magnitude",
    'acceleration_smooth': "Acceleration (smoothed)",
    'yaw_rate': "Yaw rate",
    'hard_brake_threshold': "Hard brake threshold",
    'hard_accel_threshold': "Hard acceleration threshold",
    'harsh_corner_threshold': "Harsh corner threshold",
    'hard_brake': "Hard brake",
    'hard_accel': "Hard acceleration",
    'harsh_corner': "Harsh corner",
    'score': "Score {score:g}/10",
    'invalid_trip': "Invalid trip: {codes}",
}
