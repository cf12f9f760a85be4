"""Coordinate and bounding-box helpers for GPS (WGS84) and Rijksdriehoek geometries.

Bounding boxes are ``(minx, miny, maxx, maxy)`` tuples. GPS coordinates are
always passed as longitude (x), latitude (y).
"""

from collections.abc import Iterable
from functools import lru_cache
from typing import Any

import shapely
from pyproj import Transformer
from shapely.geometry import box, shape

from pdok_apis.models.crs import CoordinateSpace

BBox = tuple[float, float, float, float]

_AREA_GEOMETRY_TYPES = {"Polygon", "MultiPolygon"}


@lru_cache(maxsize=None)
def _transformer(source: CoordinateSpace, target: CoordinateSpace) -> Transformer:
    return Transformer.from_crs(source.srs_name, target.srs_name, always_xy=True)


def wgs84_to_rijksdriehoek(lon: float, lat: float) -> tuple[float, float]:
    return _transformer(CoordinateSpace.gps, CoordinateSpace.rijksdriehoek).transform(lon, lat)


def rijksdriehoek_to_wgs84(x: float, y: float) -> tuple[float, float]:
    """Return ``(lon, lat)`` for a Rijksdriehoek coordinate."""
    return _transformer(CoordinateSpace.rijksdriehoek, CoordinateSpace.gps).transform(x, y)


def footprint_area(geometry: dict[str, Any], crs: CoordinateSpace) -> int | None:
    """Area in square meters of a GeoJSON (multi)polygon, rounded to whole meters.

    Returns None for geometry types without an area.
    """
    if geometry.get("type") not in _AREA_GEOMETRY_TYPES:
        return None

    geom = shape(geometry)
    if crs == CoordinateSpace.gps:
        geom = shapely.transform(
            geom,
            _transformer(CoordinateSpace.gps, CoordinateSpace.rijksdriehoek).transform,
            interleaved=False,
        )
    return round(geom.area)


def bbox_wgs84_to_rijksdriehoek(bbox: BBox) -> BBox:
    minx, miny = wgs84_to_rijksdriehoek(bbox[0], bbox[1])
    maxx, maxy = wgs84_to_rijksdriehoek(bbox[2], bbox[3])
    return minx, miny, maxx, maxy


def merge_bboxes(bboxes: Iterable[BBox]) -> BBox | None:
    """Smallest bbox containing all given bboxes; None when there are none."""
    merged = None
    for bbox in bboxes:
        if merged is None:
            merged = bbox
            continue
        merged = (
            min(merged[0], bbox[0]),
            min(merged[1], bbox[1]),
            max(merged[2], bbox[2]),
            max(merged[3], bbox[3]),
        )
    return merged


def stretch_to_square(bbox: BBox) -> BBox:
    """Grow the shortest side of the bbox around its center until it is square."""
    geom = box(*bbox)
    center = geom.centroid
    half = max(bbox[2] - bbox[0], bbox[3] - bbox[1]) / 2
    return center.x - half, center.y - half, center.x + half, center.y + half


def add_margin(bbox: BBox, margin: float) -> BBox:
    return bbox[0] - margin, bbox[1] - margin, bbox[2] + margin, bbox[3] + margin


def expand_to_size(bbox: BBox, size: float) -> BBox:
    """Square bbox of ``size`` by ``size`` around the bbox center.

    Only meaningful for Rijksdriehoek coordinates, where ``size`` is in meters.
    """
    square = stretch_to_square(bbox)
    width = square[2] - square[0]
    return add_margin(square, (size - width) / 2)
