"""GeoJSON helpers for property boundaries."""
from typing import Any

from shapely.errors import ShapelyError
from shapely.geometry import mapping, shape
from shapely.validation import explain_validity

POLYGON_TYPES = {"Polygon", "MultiPolygon"}


def parse_boundary(geojson: dict[str, Any]):
    """Load a Polygon/MultiPolygon, raising ValueError when it cannot serve as a boundary."""
    if not isinstance(geojson, dict) or geojson.get("type") not in POLYGON_TYPES:
        raise ValueError("geom deve ser um GeoJSON do tipo Polygon ou MultiPolygon")
    if not isinstance(geojson.get("coordinates"), (list, tuple)):
        raise ValueError("geom deve ter uma lista de coordenadas")
    try:
        geom = shape(geojson)
    except (ValueError, TypeError, IndexError, KeyError, AttributeError, ShapelyError) as exc:
        raise ValueError(f"geom invalido: {exc}") from exc
    if geom.is_empty:
        raise ValueError("geom nao pode ser vazio")
    if not geom.is_valid:
        raise ValueError(f"geom invalido: {explain_validity(geom)}")
    return geom


def validate_point(geojson: dict[str, Any]) -> dict[str, Any]:
    if not isinstance(geojson, dict) or geojson.get("type") != "Point":
        raise ValueError("centroide deve ser um GeoJSON do tipo Point")
    coordinates = geojson.get("coordinates")
    if not isinstance(coordinates, (list, tuple)) or len(coordinates) < 2:
        raise ValueError("centroide deve ter longitude e latitude")
    try:
        lon, lat = float(coordinates[0]), float(coordinates[1])
    except (TypeError, ValueError) as exc:
        raise ValueError("coordenadas do centroide devem ser numericas") from exc
    if not -180 <= lon <= 180 or not -90 <= lat <= 90:
        raise ValueError("centroide fora dos limites geograficos")
    return {"type": "Point", "coordinates": [lon, lat]}


def centroid_of(geojson: dict[str, Any]) -> dict[str, Any]:
    point = parse_boundary(geojson).centroid
    geo = mapping(point)
    return {"type": "Point", "coordinates": [round(c, 8) for c in geo["coordinates"]]}
