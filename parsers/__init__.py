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

"""Input format parsers: telemetry chunk JSON."""

from .telemetry_json import (
    parse_location,
    parse_inertial,
    parse_chunk,
    load_trip_file,
    check_chronological_order,
)

__all__ = [
    # Telemetry JSON functions
    'parse_location',
    'parse_inertial',
    'parse_chunk',
    'load_trip_file',
    'check_chronological_order',
]
