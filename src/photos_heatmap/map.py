from __future__ import annotations

import logging
from pathlib import Path
from typing import Sequence

import folium
from folium.plugins import HeatMap

from photos_heatmap.adapters import FileSystem, LocalFileSystem
from photos_heatmap.aggregate import center_point, date_range
from photos_heatmap.config import (
    BOUNDS_PADDING,
    DEFAULT_FORMAT,
    DEFAULT_ZOOM,
    DOCUMENT_TITLE,
    HEAT_LAYER_OPTIONS,
    SUPPORTED_FORMATS,
)
from photos_heatmap.errors import OutputWriteError, UnsupportedFormatError
from photos_heatmap.models import LocationRecord


logger = logging.getLogger(__name__)

INFO_PANEL_TEMPLATE = """
<style>
    .info-panel {{
        position: absolute;
        top: 10px;
        right: 10px;
        background: white;
        padding: 10px;
        border-radius: 5px;
        box-shadow: 0 2px 5px rgba(0,0,0,0.2);
        z-index: 1000;
    }}
</style>
<div class="info-panel">
    <h3>Photos Heatmap</h3>
    <p><strong>Total Photos:</strong> {count}</p>
    <p><strong>Date Range:</strong> {date_range}</p>
</div>
""".strip()


def heat_points(records: Sequence[LocationRecord]) -> list[list[float]]:
    return [[record.latitude, record.longitude, 1] for record in records]


def padded_bounds(
    lats: Sequence[float], lngs: Sequence[float], ratio: float = BOUNDS_PADDING
) -> list[list[float]]:
    # Same as Leaflet's LatLngBounds.pad(ratio): widen each side by ratio * span.
    lat_pad = (max(lats) - min(lats)) * ratio
    lng_pad = (max(lngs) - min(lngs)) * ratio
    return [
        [min(lats) - lat_pad, min(lngs) - lng_pad],
        [max(lats) + lat_pad, max(lngs) + lng_pad],
    ]


def build_heatmap(records: Sequence[LocationRecord]) -> folium.Map:
    center = center_point(records)
    m = folium.Map(location=[center.lat, center.lng], zoom_start=DEFAULT_ZOOM)

    root = m.get_root()
    root.title = DOCUMENT_TITLE
    root.html.add_child(
        folium.Element(INFO_PANEL_TEMPLATE.format(count=len(records), date_range=date_range(records))),
        name="info_panel",
    )

    HeatMap(heat_points(records), **HEAT_LAYER_OPTIONS).add_to(m)

    if records:
        lats = [record.latitude for record in records]
        lngs = [record.longitude for record in records]
        m.fit_bounds(padded_bounds(lats, lngs))

    return m


def _pin_element_ids(root: folium.Element) -> None:
    # folium names every element with a random hex id; fix them so the same
    # records always render to the same bytes.
    stack = [root]
    counter = 0
    while stack:
        element = stack.pop(0)
        element._id = f"{counter:04d}"
        counter += 1
        stack.extend(element._children.values())


def render_heatmap(records: Sequence[LocationRecord]) -> str:
    m = build_heatmap(records)
    root = m.get_root()
    _pin_element_ids(root)
    return root.render()


def generate_heatmap(
    records: Sequence[LocationRecord],
    output_path: str | Path,
    output_format: str = DEFAULT_FORMAT,
    filesystem: FileSystem | None = None,
) -> None:
    if output_format.strip().lower() not in SUPPORTED_FORMATS:
        raise UnsupportedFormatError(output_format)

    document = render_heatmap(records)

    filesystem = filesystem or LocalFileSystem()
    try:
        filesystem.write_file(output_path, document)
    except OSError as exc:
        raise OutputWriteError(output_path, str(exc)) from exc
    logger.info("wrote heatmap with %d points to %s", len(records), output_path)
