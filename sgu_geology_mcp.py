#!/usr/bin/env python3
"""
Serveur MCP pour les données géologiques de la SGU (Suède)
- Berggrund : unités géologiques vectorielles (OGC API Features)
- Cartes WMS : berggrund, jordarter, grundvatten, radon, brunnar, ballast
- Interrogation ponctuelle : WMS GetFeatureInfo

Les coordonnées reçues sont en WGS84 ; les services SGU travaillent en SWEREF99TM.
"""

import asyncio
import json
import logging
import os
import sys
from typing import Any, Dict, List, Optional

from mcp.server import Server
from mcp.types import Tool, TextContent
import mcp.server.stdio

from sgu_coordinates import CRS_WGS84, Wgs84BoundingBox, Wgs84Point
from sgu_errors import McpToolError, ValidationError, error_payload
from sgu_geo_services import DEFAULT_BUFFER_METERS, SGUGeoServices
from sgu_geometry import CRS_SWEREF99TM, bbox_to_dict, corridor_to_bounding_box, validate_bbox
from sgu_layers_catalog import (
    describe_layers,
    get_all_map_layers,
    get_all_point_data_types,
)


logger = logging.getLogger(__name__)

# Initialisation
app = Server("sgu-geology-mcp")
sgu_services = SGUGeoServices()


def _json_content(data: Any) -> List[TextContent]:
    return [TextContent(type="text", text=json.dumps(data, ensure_ascii=False, indent=2))]


def _require_number(arguments: Dict[str, Any], key: str) -> float:
    value = arguments.get(key)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(f"{key} must be a number", key)
    return value


def _parse_bbox(arguments: Dict[str, Any]) -> Optional[Wgs84BoundingBox]:
    keys = ("minLat", "minLon", "maxLat", "maxLon")
    if any(arguments.get(k) is None for k in keys):
        return None
    min_lat, min_lon, max_lat, max_lon = (_require_number(arguments, k) for k in keys)
    return Wgs84BoundingBox(min_lat=min_lat, min_lon=min_lon, max_lat=max_lat, max_lon=max_lon)


def _parse_coordinates(arguments: Dict[str, Any]) -> Optional[List[Wgs84Point]]:
    raw = arguments.get("coordinates")
    if not raw:
        return None
    points = []
    for item in raw:
        if not isinstance(item, dict):
            raise ValidationError("coordinates must be objects with latitude and longitude", "coordinates")
        points.append(Wgs84Point(
            latitude=_require_number(item, "latitude"),
            longitude=_require_number(item, "longitude"),
        ))
    return points


async def _execute_tool_logic(name: str, arguments: Dict[str, Any]) -> List[TextContent]:
    if name == "sgu_query_point":
        latitude = _require_number(arguments, "latitude")
        longitude = _require_number(arguments, "longitude")
        data_type = arguments.get("dataType")

        point = sgu_services.transform_point(Wgs84Point(latitude=latitude, longitude=longitude))
        data = await sgu_services.query_point(data_type, point)

        return _json_content({
            "coordinate_system": CRS_WGS84,
            "coordinates": {"latitude": latitude, "longitude": longitude},
            "data_type": data_type,
            "found": data is not None,
            data_type: data,
        })

    elif name == "sgu_get_map":
        layer = arguments.get("layer")
        bbox = sgu_services.build_bounding_box(
            bbox=_parse_bbox(arguments),
            coordinates=_parse_coordinates(arguments),
            buffer_meters=arguments.get("bufferMeters", DEFAULT_BUFFER_METERS),
        )
        result = sgu_services.query_map_image(
            layer,
            bbox,
            width=arguments.get("width", 800),
            height=arguments.get("height", 600),
            format=arguments.get("format", "png"),
        )
        return _json_content({"layer": layer, **result})

    elif name == "sgu_get_bedrock":
        coordinates = _parse_coordinates(arguments)
        buffer_meters = arguments.get("bufferMeters", DEFAULT_BUFFER_METERS)

        # L'emprise sert toujours de repli au filtre par polygone
        if coordinates:
            corridor = sgu_services.build_corridor(coordinates, buffer_meters)
            bbox = corridor_to_bounding_box(corridor)
            validate_bbox(bbox)
        else:
            corridor = None
            bbox = sgu_services.build_bounding_box(bbox=_parse_bbox(arguments))

        result = await sgu_services.query_area_features(
            "bedrock",
            bbox,
            corridor=corridor,
            limit=arguments.get("limit", 100),
        )
        return _json_content({
            "query_type": "corridor" if corridor else "bbox",
            "input_coordinate_system": CRS_WGS84,
            "internal_coordinate_system": CRS_SWEREF99TM,
            "bbox_used": bbox_to_dict(bbox),
            "used_polygon_filter": result["used_polygon_filter"],
            "count": len(result["features"]),
            "features": result["features"],
        })

    elif name == "sgu_describe_layers":
        layers = describe_layers()
        return _json_content({
            "coordinate_system": f"{CRS_WGS84} input, {CRS_SWEREF99TM} (SWEREF99TM) upstream",
            "tools": {
                "sgu_query_point": {
                    "description": "Query data at a specific point (latitude, longitude)",
                    "data_types": layers["point_query"],
                },
                "sgu_get_map": {
                    "description": "Generate map image for an area (bbox or corridor)",
                    "layers": layers["map"],
                },
                "sgu_get_bedrock": {
                    "description": "Get bedrock feature data for an area",
                },
            },
        })

    elif name == "sgu_list_service_layers":
        layers = await sgu_services.list_service_layers(arguments.get("layer"))
        return _json_content({"total": len(layers), "layers": layers})

    raise ValidationError(f"Unknown tool: {name}", "name")


_BBOX_PROPERTIES = {
    "minLat": {"type": "number", "description": "Bbox min latitude (WGS84). Stockholm ~59.3"},
    "minLon": {"type": "number", "description": "Bbox min longitude (WGS84). Stockholm ~18.0"},
    "maxLat": {"type": "number", "description": "Bbox max latitude (WGS84)"},
    "maxLon": {"type": "number", "description": "Bbox max longitude (WGS84)"},
}

_CORRIDOR_PROPERTIES = {
    "coordinates": {
        "type": "array",
        "description": "Corridor centerline [{latitude, longitude}, ...]. Alternative to bbox.",
        "items": {
            "type": "object",
            "properties": {
                "latitude": {"type": "number"},
                "longitude": {"type": "number"},
            },
            "required": ["latitude", "longitude"],
        },
        "minItems": 2,
    },
    "bufferMeters": {
        "type": "number",
        "default": DEFAULT_BUFFER_METERS,
        "minimum": 1,
        "maximum": 10000,
        "description": "Corridor buffer in meters on each side of the line (default: 500)",
    },
}


@app.list_tools()
async def list_tools() -> list[Tool]:
    """Liste tous les outils disponibles"""
    return [
        Tool(
            name="sgu_query_point",
            description=(
                "Query geological data at a specific coordinate in Sweden. "
                "Returns detailed information based on dataType. "
                "Coordinates in WGS84 (latitude/longitude). "
                "Returns found=false when nothing is mapped at the point."
            ),
            inputSchema={
                "type": "object",
                "properties": {
                    "latitude": {
                        "type": "number",
                        "description": "Latitude (WGS84). Stockholm ~59.33, Gothenburg ~57.71, Malmo ~55.61",
                    },
                    "longitude": {
                        "type": "number",
                        "description": "Longitude (WGS84). Stockholm ~18.07, Gothenburg ~11.97, Malmo ~13.00",
                    },
                    "dataType": {
                        "type": "string",
                        "enum": get_all_point_data_types(),
                        "description": (
                            "bedrock (rock type/age), soil_type (surface layers), "
                            "boulder_coverage (blockiness), soil_depth (depth to bedrock), "
                            "groundwater (aquifer), groundwater_vulnerability (contamination risk), "
                            "landslide (historical), radon_risk (gamma/uranium), well (borehole data)"
                        ),
                    },
                },
                "required": ["latitude", "longitude", "dataType"],
            },
        ),
        Tool(
            name="sgu_get_map",
            description=(
                "Generate a geological map image URL for an area in Sweden. "
                "Provide bbox (minLat, minLon, maxLat, maxLon) OR corridor (coordinates + bufferMeters). "
                "Coordinates in WGS84. Returns map image URL and legend URL."
            ),
            inputSchema={
                "type": "object",
                "properties": {
                    "layer": {
                        "type": "string",
                        "enum": get_all_map_layers(),
                        "description": "Map layer (see sgu_describe_layers)",
                    },
                    **_BBOX_PROPERTIES,
                    **_CORRIDOR_PROPERTIES,
                    "width": {"type": "integer", "default": 800, "minimum": 100, "maximum": 4096,
                              "description": "Image width px (default: 800)"},
                    "height": {"type": "integer", "default": 600, "minimum": 100, "maximum": 4096,
                               "description": "Image height px (default: 600)"},
                    "format": {"type": "string", "enum": ["png", "jpeg"], "default": "png",
                               "description": "Image format (default: png)"},
                },
                "required": ["layer"],
            },
        ),
        Tool(
            name="sgu_get_bedrock",
            description=(
                "Get bedrock geology data for an area in Sweden: rock types, geological units, "
                "lithology and tectonic units. Provide bbox (minLat, minLon, maxLat, maxLon) or a "
                "corridor (coordinates + bufferMeters). Coordinates in WGS84. "
                "Corridors are filtered with a polygon when the service allows it "
                "(see used_polygon_filter in the result)."
            ),
            inputSchema={
                "type": "object",
                "properties": {
                    **_BBOX_PROPERTIES,
                    **_CORRIDOR_PROPERTIES,
                    "limit": {"type": "integer", "default": 100, "minimum": 1, "maximum": 1000,
                              "description": "Max features to return (1-1000, default: 100)"},
                },
            },
        ),
        Tool(
            name="sgu_describe_layers",
            description=(
                "List all available SGU geological data layers with descriptions. "
                "Use this to understand what data is available before querying."
            ),
            inputSchema={"type": "object", "properties": {}},
        ),
        Tool(
            name="sgu_list_service_layers",
            description=(
                "List the layers published by the SGU map service behind a catalog layer "
                "(live WMS GetCapabilities). Useful to check layer identifiers."
            ),
            inputSchema={
                "type": "object",
                "properties": {
                    "layer": {"type": "string", "enum": get_all_map_layers()},
                },
                "required": ["layer"],
            },
        ),
    ]


@app.call_tool()
async def call_tool(name: str, arguments: Any) -> list[TextContent]:
    """Exécute un outil"""
    try:
        return await _execute_tool_logic(name, arguments or {})
    except McpToolError as exc:
        logger.info("Tool %s failed: %s %s", name, exc.code, exc.message)
        return _json_content(error_payload(exc))
    except ValueError as exc:
        return _json_content(error_payload(exc))


async def main():
    """Point d'entrée principal"""
    # stdout transporte le flux MCP : journalisation sur stderr
    logging.basicConfig(
        stream=sys.stderr,
        level=os.getenv("SGU_LOG_LEVEL", "WARNING").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    async with mcp.server.stdio.stdio_server() as (read_stream, write_stream):
        await app.run(
            read_stream,
            write_stream,
            app.create_initialization_options()
        )


def run():
    asyncio.run(main())


if __name__ == "__main__":
    run()
