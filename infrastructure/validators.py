"""
Geometry Validators.

Polygon predicate used by record validation for the optional `polygon`
field of a dataset version.

Exports:
    is_valid_polygon: FeatureCollection -> bool
"""

from typing import Any, Dict

from shapely.errors import GeometryTypeError, ShapelyError
from shapely.geometry import shape

from util_logger import LoggerFactory, ComponentType

logger = LoggerFactory.create_logger(ComponentType.VALIDATOR, "validators")

_ACCEPTED_GEOMETRY_TYPES = ("Polygon",)


def is_valid_polygon(feature_collection: Dict[str, Any]) -> bool:
    """
    True iff the input is a GeoJSON FeatureCollection holding exactly one
    feature whose geometry is a valid, non-empty Polygon.
    """
    if not isinstance(feature_collection, dict):
        return False
    if feature_collection.get("type") != "FeatureCollection":
        return False

    features = feature_collection.get("features")
    if not isinstance(features, list) or len(features) != 1:
        return False

    feature = features[0]
    geometry = feature.get("geometry") if isinstance(feature, dict) else None
    if not isinstance(geometry, dict) or geometry.get("type") not in _ACCEPTED_GEOMETRY_TYPES:
        return False

    try:
        polygon = shape(geometry)
    except (GeometryTypeError, ShapelyError, ValueError, TypeError, IndexError, KeyError) as e:
        logger.debug(f"Polygon could not be built: {type(e).__name__}: {e}")
        return False

    if polygon.is_empty or not polygon.is_valid:
        logger.debug("Polygon is empty or not valid (self-intersection or bad ring)")
        return False
    return True
