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
DriveScore CLI entry point.

Scores one driving trip from a JSON file of uploaded telemetry chunks.
"""
import json
import os
import sys
import argparse
import logging

# Add script directory to path for imports
SCRIPT_DIR = os.path.dirname(os.path.abspath(__file__))
if SCRIPT_DIR not in sys.path:
    sys.path.insert(0, SCRIPT_DIR)

from core.calculator import calculate_safety_score
from core.helpers import flatten_chunks
from core.summary import generate_trip_summary
from core.visualization import plot_trip_chart, plot_trip_track
from core.warnings import compute_warnings
from parsers.telemetry_json import load_trip_file, check_chronological_order
from locales.strings import ERRORS

# Configure logging (basicConfig is sufficient, no need for duplicate handler)
logging.basicConfig(
    level=logging.ERROR,
    format='%(levelname)s: %(message)s',
    stream=sys.stderr
)
logger = logging.getLogger('drivescore_calculator')


def format_duration_ms(duration_ms):
    """Format duration from milliseconds to mm:ss string."""
    if duration_ms is None:
        return ""
    seconds_total = int(duration_ms // 1000)
    minutes = seconds_total // 60
    seconds = seconds_total % 60
    return f"{minutes:02d}:{seconds:02d}"


def build_charts(chunks, score_result, output_dir):
    """
    Draw trip chart and route map.

    Returns:
        dict of chart name -> file path
    """
    locations, inertial = flatten_chunks(chunks)
    chart_paths = {}

    chart_path = plot_trip_chart(locations, inertial, score_result, output_dir)
    if chart_path:
        chart_paths['trip_chart'] = chart_path

    track_path = plot_trip_track(locations, score_result, output_dir, inertial=inertial)
    if track_path:
        chart_paths['track'] = track_path

    return chart_paths


def format_json_response(score_result, trip_summary, chunks, chart_paths=None,
                         warnings_dict=None, cautions_dict=None, trip_file=None):
    """
    Format JSON response for CLI output.

    Args:
        score_result: SafetyScoreResult
        trip_summary: TripSummary
        chunks: parsed telemetry chunks
        chart_paths: dict of generated chart files
        warnings_dict: warnings
        cautions_dict: cautions
        trip_file: input file path

    Returns:
        dict with JSON response
    """
    response = {
        "success": True,
        "results": score_result.to_dict(),
        "summary": {
            "text": trip_summary.summary,
            "recommendation": trip_summary.recommendation,
            "primary_category": trip_summary.primary_category,
        },
        "graphs": chart_paths or {},
        "session_info": {
            "chunks": len(chunks),
        },
    }

    if trip_file:
        response["file"] = os.path.basename(trip_file)

    if chunks:
        session_ids = sorted({c.session_id for c in chunks if c.session_id})
        if session_ids:
            response["session_info"]["session_ids"] = session_ids
        duration_ms = chunks[-1].end_time - chunks[0].start_time
        response["session_info"]["duration_ms"] = duration_ms
        response["session_info"]["duration_formatted"] = format_duration_ms(duration_ms)

    if warnings_dict:
        response["warning"] = warnings_dict

    if cautions_dict:
        response["caution"] = cautions_dict

    return response


def main():
    """CLI entry point."""
    parser = argparse.ArgumentParser(description='Driver safety score from trip telemetry')
    parser.add_argument('trip_file', help='Path to JSON file with telemetry chunks')
    parser.add_argument('--output', help='Output directory for charts', default=None)
    parser.add_argument('--no-order-check', dest='order_check', action='store_false',
                        help='Skip chronological order check of chunks and samples')
    parser.add_argument('--verbose', action='store_true', help='Log progress to stderr')
    args = parser.parse_args()

    if args.verbose:
        logging.getLogger().setLevel(logging.INFO)

    try:
        if not os.path.exists(args.trip_file):
            error_response = {
                "success": False,
                "error": ERRORS['file_not_found'].format(file_path=args.trip_file)
            }
            print(json.dumps(error_response, ensure_ascii=False, indent=2))
            sys.exit(1)

        chunks = load_trip_file(args.trip_file)
        if args.order_check:
            check_chronological_order(chunks)

        score_result = calculate_safety_score(chunks)
        trip_summary = generate_trip_summary(score_result)

        locations, inertial = flatten_chunks(chunks)
        warnings_dict, cautions_dict = compute_warnings(locations, inertial)

        chart_paths = {}
        if args.output:
            chart_paths = build_charts(chunks, score_result, args.output)
            if not chart_paths:
                logger.error(ERRORS['chart_failed'])

        response = format_json_response(
            score_result,
            trip_summary,
            chunks,
            chart_paths,
            warnings_dict,
            cautions_dict,
            args.trip_file
        )

        print(json.dumps(response, ensure_ascii=False, indent=2, allow_nan=False))

    except Exception as e:
        error_response = {
            "success": False,
            "error": f"Error: {str(e)}"
        }
        print(json.dumps(error_response, ensure_ascii=False, indent=2))
        sys.exit(1)


if __name__ == "__main__":
    main()
