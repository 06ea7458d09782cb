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
DriveScore visualization module.

Contains functions for trip chart and route map generation using matplotlib.
"""
import logging
import os

import matplotlib.pyplot as plt
from matplotlib.collections import LineCollection
import numpy as np
from scipy.signal import savgol_filter

try:
    from .. import config
except ImportError:
    import config

try:
    from locales.strings import LABELS
except ImportError:
    from ..locales.strings import LABELS

from .detectors import speeding_mask
from .helpers import location_arrays, inertial_arrays, acceleration_magnitudes, yaw_rates_deg
from .structures import MS_PER_MINUTE

logger = logging.getLogger(__name__)

# Marker style per detected event type: (event_indices key, label key, color, marker)
EVENT_STYLES = (
    ('hard_brakes', 'hard_brake', '#c0392b', 'v'),
    ('hard_accelerations', 'hard_accel', '#e67e22', '^'),
    ('harsh_corners', 'harsh_corner', '#8e44ad', 'D'),
)


def smooth_trace(values, window_length=None, polyorder=None):
    """Savitzky-Golay smoothing; short traces are returned unchanged.

    Args:
        values: 1-D array
        window_length: filter window (default: config.SMOOTHING_WINDOW_LENGTH)
        polyorder: polynomial order (default: config.SMOOTHING_POLYORDER)

    Returns:
        np.ndarray of the same length
    """
    values = np.asarray(values, dtype=float)
    if window_length is None:
        window_length = getattr(config, 'SMOOTHING_WINDOW_LENGTH', 25)
    if polyorder is None:
        polyorder = getattr(config, 'SMOOTHING_POLYORDER', 2)

    # Window must be odd and fit the data
    window_length = min(window_length, len(values))
    if window_length % 2 == 0:
        window_length -= 1
    if window_length <= polyorder:
        return values

    return savgol_filter(values, window_length, polyorder)


def _trip_start_ms(locations, inertial):
    starts = []
    if locations:
        starts.append(locations[0].timestamp)
    if inertial:
        starts.append(inertial[0].timestamp)
    return min(starts) if starts else 0


def _minutes(times_ms, start_ms):
    return (np.asarray(times_ms, dtype=np.int64) - start_ms) / MS_PER_MINUTE


def _output_path(output_dir, name):
    os.makedirs(output_dir, exist_ok=True)
    return os.path.join(output_dir, name)


def _chart_title(result):
    if result is None:
        return LABELS['speed_chart_title']
    if not result.is_valid:
        return LABELS['invalid_trip'].format(codes=', '.join(result.validation.codes))
    return LABELS['score'].format(score=result.total_score)


def _shade_speeding(ax, minutes, mask):
    """Shade runs of intervals whose end sample is above the speeding threshold."""
    alpha = getattr(config, 'SPEEDING_SHADE_ALPHA', 0.2)

    # Run boundaries: interval i spans minutes[i]..minutes[i + 1]
    padded = np.concatenate(([0], np.asarray(mask, dtype=int), [0]))
    edges = np.flatnonzero(np.diff(padded))
    for n, (start, stop) in enumerate(zip(edges[::2], edges[1::2])):
        ax.axvspan(minutes[start], minutes[stop], color='#e74c3c', alpha=alpha, linewidth=0,
                   label=LABELS['speeding'] if n == 0 else None)


def plot_trip_chart(locations, inertial, result=None, output_dir='.', speed_limit_kmh=None):
    """Build the speed and motion sensor chart of one trip.

    Args:
        locations: ordered sequence of LocationSample
        inertial: ordered sequence of InertialSample
        result: SafetyScoreResult for title and event markers (optional)
        output_dir: directory for the PNG file
        speed_limit_kmh: speed limit drawn on the chart (default: config fallback)

    Returns:
        str: path to saved file or None if there is nothing to draw
    """
    if len(locations) < 2 and len(inertial) < 2:
        logger.warning("Not enough samples for trip chart")
        return None

    if speed_limit_kmh is None:
        speed_limit_kmh = getattr(config, 'FALLBACK_SPEED_LIMIT_KMH', 50.0)
    threshold_kmh = speed_limit_kmh + getattr(config, 'SPEEDING_BUFFER_KMH', 5.0)
    start_ms = _trip_start_ms(locations, inertial)
    marker_size = getattr(config, 'EVENT_MARKER_SIZE', 60)
    legend_fontsize = getattr(config, 'LEGEND_FONTSIZE', 10)

    fig, (ax_speed, ax_inertial) = plt.subplots(
        2, 1, sharex=True, figsize=getattr(config, 'CHART_FIGSIZE', (14, 9))
    )

    # ===== PANEL 1: Speed =====
    if len(locations) >= 2:
        times_ms, _, _, speeds_kmh = location_arrays(locations)
        minutes = _minutes(times_ms, start_ms)
        ax_speed.plot(minutes, speeds_kmh, '-', linewidth=1.5, color='#2980b9', label=LABELS['speed'])
        ax_speed.axhline(threshold_kmh, color='#c0392b', linestyle='--', linewidth=1,
                         label=LABELS['speed_limit'])
        _shade_speeding(ax_speed, minutes, speeding_mask(locations, speed_limit_kmh))

    ax_speed.set_title(f"{_chart_title(result)}\n{LABELS['speed_chart_title']}")
    ax_speed.set_ylabel(LABELS['speed_axis'])
    ax_speed.grid(True, linestyle='--', alpha=0.7)
    ax_speed.legend(loc='upper right', fontsize=legend_fontsize)

    # ===== PANEL 2: Motion sensors =====
    if len(inertial) >= 2:
        times_ms, _, _ = inertial_arrays(inertial)
        minutes = _minutes(times_ms, start_ms)
        magnitudes = acceleration_magnitudes(inertial)
        yaw_rates = yaw_rates_deg(inertial)

        ax_inertial.plot(minutes, magnitudes, '-', linewidth=0.6, color='#95a5a6', alpha=0.7,
                         label=LABELS['acceleration'])
        ax_inertial.plot(minutes, smooth_trace(magnitudes), '-', linewidth=1.5, color='#2c3e50',
                         label=LABELS['acceleration_smooth'])
        ax_inertial.axhline(getattr(config, 'HARD_BRAKE_THRESHOLD_MS2', 3.5), color='#c0392b',
                            linestyle='--', linewidth=1, label=LABELS['hard_brake_threshold'])
        ax_inertial.axhline(getattr(config, 'HARD_ACCEL_THRESHOLD_MS2', 3.0), color='#e67e22',
                            linestyle=':', linewidth=1, label=LABELS['hard_accel_threshold'])

        ax_yaw = ax_inertial.twinx()
        ax_yaw.plot(minutes, yaw_rates, '-', linewidth=0.8, color='#8e44ad', alpha=0.5,
                    label=LABELS['yaw_rate'])
        ax_yaw.axhline(getattr(config, 'HARSH_CORNER_THRESHOLD_DEG_S', 25.0), color='#8e44ad',
                       linestyle='-.', linewidth=1, label=LABELS['harsh_corner_threshold'])
        ax_yaw.set_ylabel(LABELS['yaw_axis'])

        if result is not None:
            for key, label_key, color, marker in EVENT_STYLES:
                indices = result.event_indices.get(key, [])
                if not indices:
                    continue
                target = ax_yaw if key == 'harsh_corners' else ax_inertial
                values = yaw_rates if key == 'harsh_corners' else magnitudes
                target.scatter(minutes[indices], values[indices], s=marker_size, color=color,
                               marker=marker, zorder=5, label=LABELS[label_key])

        handles, labels = ax_inertial.get_legend_handles_labels()
        yaw_handles, yaw_labels = ax_yaw.get_legend_handles_labels()
        ax_inertial.legend(handles + yaw_handles, labels + yaw_labels,
                           loc='upper right', fontsize=legend_fontsize)

    ax_inertial.set_title(LABELS['inertial_chart_title'])
    ax_inertial.set_xlabel(LABELS['time_axis'])
    ax_inertial.set_ylabel(LABELS['acceleration_axis'])
    ax_inertial.grid(True, linestyle='--', alpha=0.7)

    fig.tight_layout()

    chart_filename = _output_path(output_dir, 'trip_chart.png')
    plt.savefig(chart_filename, dpi=getattr(config, 'CHART_DPI', 120),
                bbox_inches='tight', facecolor='white')
    plt.close(fig)
    return chart_filename


def event_locations(locations, inertial, indices):
    """Map inertial sample indices to the nearest-in-time location indices.

    Args:
        locations: ordered sequence of LocationSample
        inertial: ordered sequence of InertialSample
        indices: inertial sample indices

    Returns:
        np.ndarray of location indices
    """
    if not locations or not indices:
        return np.array([], dtype=int)

    location_times, _, _, _ = location_arrays(locations)
    inertial_times, _, _ = inertial_arrays(inertial)
    event_times = inertial_times[np.asarray(indices, dtype=int)]

    pos = np.clip(np.searchsorted(location_times, event_times), 1, max(1, len(location_times) - 1))
    if len(location_times) == 1:
        return np.zeros(len(event_times), dtype=int)

    left = location_times[pos - 1]
    right = location_times[pos]
    return np.where(event_times - left <= right - event_times, pos - 1, pos)


def plot_trip_track(locations, result=None, output_dir='.', inertial=None):
    """Build route map coloured by speed.

    Args:
        locations: ordered sequence of LocationSample
        result: SafetyScoreResult for title and event markers (optional)
        output_dir: directory for the PNG file
        inertial: inertial samples the result's event indices refer to

    Returns:
        str: path to saved file or None
    """
    if len(locations) < 2:
        logger.warning("Not enough location samples for track map")
        return None

    _, lats, lons, speeds_kmh = location_arrays(locations)

    fig, ax = plt.subplots(figsize=getattr(config, 'TRACK_FIGSIZE', (10, 10)))

    # Line segments for LineCollection, coloured by speed at segment end
    points = np.array([lons, lats]).T.reshape(-1, 1, 2)
    segments = np.concatenate([points[:-1], points[1:]], axis=1)

    speed_min = float(np.min(speeds_kmh))
    speed_max = float(np.max(speeds_kmh))
    if speed_max <= speed_min:
        speed_max = speed_min + 1.0

    norm = plt.Normalize(speed_min, speed_max)
    lc = LineCollection(segments, cmap=getattr(config, 'TRACK_COLORMAP', 'viridis'), norm=norm,
                        linewidth=getattr(config, 'TRACK_LINE_WIDTH', 3), zorder=3)
    lc.set_array(speeds_kmh[1:])
    ax.add_collection(lc)
    ax.autoscale()
    ax.set_aspect('equal')

    cbar = fig.colorbar(lc, ax=ax, shrink=0.7, pad=0.02)
    cbar.set_label(LABELS['speed_colorbar'], fontsize=12)

    if result is not None and inertial:
        for key, label_key, color, marker in EVENT_STYLES:
            idx = event_locations(locations, inertial, result.event_indices.get(key, []))
            if len(idx) == 0:
                continue
            ax.scatter(lons[idx], lats[idx], s=getattr(config, 'EVENT_MARKER_SIZE', 60),
                       color=color, marker=marker, edgecolors='black', zorder=5,
                       label=LABELS[label_key])
        if ax.get_legend_handles_labels()[0]:
            ax.legend(loc='upper right', fontsize=getattr(config, 'LEGEND_FONTSIZE', 10))

    ax.set_title(f"{LABELS['track_title']} - {_chart_title(result)}", fontsize=14, fontweight='bold')
    ax.set_xlabel(LABELS['longitude_axis'])
    ax.set_ylabel(LABELS['latitude_axis'])

    track_filename = _output_path(output_dir, 'trip_track.png')
    plt.savefig(track_filename, dpi=getattr(config, 'CHART_DPI', 120),
                bbox_inches='tight', facecolor='white')
    plt.close(fig)
    return track_filename
