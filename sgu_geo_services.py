"""
Module pour accéder aux services géologiques de la SGU
Supporte OGC API Features (berggrund vectoriel) et WMS (cartes, interrogation ponctuelle)
"""

import logging
from typing import Any, Dict, List, Optional, Sequence

import httpx

from sgu_coordinates import (
    Wgs84BoundingBox,
    Wgs84Point,
    wgs84_bbox_to_sweref99,
    wgs84_coordinates_to_sweref99,
    wgs84_to_sweref99,
)
from sgu_errors import UpstreamApiError, ValidationError
from sgu_geometry import (
    CRS_SWEREF99TM,
    BoundingBox,
    Corridor,
    Sweref99Point,
    bbox_around_point,
    bbox_to_dict,
    corridor_to_bounding_box,
    corridor_to_wkt_polygon,
    validate_bbox,
    validate_point,
)
from sgu_http import DEFAULT_TIMEOUT
from sgu_layers_catalog import (
    MAP_LAYERS,
    SGU_OGC_BEDROCK_COLLECTION,
    SGU_OGC_BEDROCK_URL,
    get_map_layer,
    get_point_query,
)
from sgu_ogc import OgcFeaturesClient
from sgu_records import shape_bedrock_feature, shape_point_record
from sgu_wms import WmsClient


logger = logging.getLogger(__name__)

DEFAULT_BUFFER_METERS = 500

# Interrogation ponctuelle : carré de 200 m, image 256x256, pixel central
POINT_QUERY_BUFFER_METERS = 100
POINT_QUERY_IMAGE_SIZE = 256

IMAGE_FORMATS = {"png": "image/png", "jpeg": "image/jpeg"}

# Seule couche servie en OGC API Features
AREA_FEATURE_LAYERS = {"bedrock"}


class SGUGeoServices:
    """Client pour les services géologiques SGU"""

    def __init__(
        self,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self._transport = transport
        self._timeout = timeout
        self._bedrock_ogc = OgcFeaturesClient(SGU_OGC_BEDROCK_URL, timeout=timeout, transport=transport)

    def _wms_client(self, layer_name: str) -> WmsClient:
        layer = get_map_layer(layer_name)
        return WmsClient(layer.url, version=layer.version, timeout=self._timeout, transport=self._transport)

    # ------------------------------------------------------------------
    # Géométries
    # ------------------------------------------------------------------

    def transform_point(self, point: Wgs84Point) -> Sweref99Point:
        """Point WGS84 -> SWEREF99TM, contrôlé avant et après projection"""
        result = wgs84_to_sweref99(point)
        # Le bord sud de l'emprise WGS84 (55°N) projette sous y = 6 100 000
        validate_point(result)
        return result

    def build_corridor(
        self,
        coordinates: Sequence[Wgs84Point],
        buffer_meters: float = DEFAULT_BUFFER_METERS,
    ) -> Corridor:
        return Corridor(
            coordinates=tuple(wgs84_coordinates_to_sweref99(coordinates)),
            buffer_meters=buffer_meters,
        )

    def build_bounding_box(
        self,
        bbox: Optional[Wgs84BoundingBox] = None,
        coordinates: Optional[Sequence[Wgs84Point]] = None,
        buffer_meters: float = DEFAULT_BUFFER_METERS,
    ) -> BoundingBox:
        """
        Emprise SWEREF99TM validée, depuis une bbox WGS84 ou un corridor WGS84.
        Le corridor est prioritaire si les deux sont fournis.
        """
        if coordinates:
            result = corridor_to_bounding_box(self.build_corridor(coordinates, buffer_meters))
        elif bbox is not None:
            result = wgs84_bbox_to_sweref99(bbox)
        else:
            raise ValidationError(
                "Either bbox (minLat, minLon, maxLat, maxLon) or corridor "
                "(coordinates array with [{latitude, longitude}, ...]) must be provided"
            )

        validate_bbox(result)
        return result

    # ------------------------------------------------------------------
    # Entités vectorielles (OGC API Features)
    # ------------------------------------------------------------------

    async def query_area_features(
        self,
        layer: str,
        bbox: BoundingBox,
        corridor: Optional[Corridor] = None,
        limit: int = 100,
    ) -> Dict[str, Any]:
        """
        Entités berggrund d'une emprise ou d'un corridor.

        Avec un corridor, filtre CQL par polygone ; si le polygone ne peut pas
        être construit ou si le service refuse le filtre, une seule nouvelle
        tentative est faite avec l'emprise. used_polygon_filter indique la
        stratégie qui a produit le résultat.
        """
        if layer not in AREA_FEATURE_LAYERS:
            raise ValidationError(f"Unknown feature layer: {layer}", "layer")

        polygon_wkt = None
        if corridor is not None:
            try:
                polygon_wkt = corridor_to_wkt_polygon(corridor)
            except (ValidationError, ValueError, ArithmeticError) as exc:
                logger.info("Corridor polygon unavailable, using bbox: %s", exc)

        used_polygon_filter = polygon_wkt is not None

        try:
            features = await self._bedrock_ogc.get_items(
                SGU_OGC_BEDROCK_COLLECTION,
                bbox=None if used_polygon_filter else bbox,
                polygon_wkt=polygon_wkt,
                limit=limit,
            )
        except UpstreamApiError:
            if not used_polygon_filter:
                raise
            logger.info("Polygon filter rejected by %s, retrying with bbox", SGU_OGC_BEDROCK_URL)
            try:
                features = await self._bedrock_ogc.get_items(
                    SGU_OGC_BEDROCK_COLLECTION,
                    bbox=bbox,
                    limit=limit,
                )
            except UpstreamApiError as exc:
                raise UpstreamApiError(
                    "Failed to fetch bedrock data for this area. Try again or narrow the area.",
                    exc.status_code,
                    SGU_OGC_BEDROCK_URL,
                ) from exc
            used_polygon_filter = False

        return {
            "features": [shape_bedrock_feature(f) for f in features],
            "used_polygon_filter": used_polygon_filter,
        }

    # ------------------------------------------------------------------
    # Cartes (WMS GetMap)
    # ------------------------------------------------------------------

    def query_map_image(
        self,
        layer: str,
        bbox: BoundingBox,
        width: int = 800,
        height: int = 600,
        format: str = "png",
    ) -> Dict[str, Any]:
        """URL de carte, URL de légende et emprise utilisée"""
        descriptor = get_map_layer(layer)
        if descriptor is None:
            raise ValidationError(
                f"Unknown map layer: {layer}. Available: {', '.join(MAP_LAYERS)}",
                "layer",
            )
        if format not in IMAGE_FORMATS:
            raise ValidationError(f"Unsupported image format: {format}", "format")

        client = self._wms_client(layer)
        map_url = client.get_map_url(
            layers=descriptor.layers,
            bbox=bbox,
            width=width,
            height=height,
            format=IMAGE_FORMATS[format],
        )
        return {
            "map_url": map_url,
            "legend_url": client.get_legend_url(descriptor.layers[0]),
            "bbox": bbox_to_dict(bbox),
            "coordinate_system": CRS_SWEREF99TM,
            "layers": list(descriptor.layers),
        }

    # ------------------------------------------------------------------
    # Interrogation ponctuelle (WMS GetFeatureInfo)
    # ------------------------------------------------------------------

    async def query_point(self, data_type: str, point: Sweref99Point) -> Optional[Dict[str, Any]]:
        """Enregistrement au point, ou None si aucune entité n'y est cartographiée"""
        query = get_point_query(data_type)
        if query is None:
            raise ValidationError(f"Unknown data type: {data_type}", "dataType")
        validate_point(point)

        descriptor = get_map_layer(query.map_layer)
        pixel = POINT_QUERY_IMAGE_SIZE // 2
        response = await self._wms_client(query.map_layer).get_feature_info(
            layers=descriptor.layers,
            bbox=bbox_around_point(point, POINT_QUERY_BUFFER_METERS),
            width=POINT_QUERY_IMAGE_SIZE,
            height=POINT_QUERY_IMAGE_SIZE,
            x=pixel,
            y=pixel,
        )
        return shape_point_record(data_type, response)

    async def list_service_layers(self, layer: str) -> List[Dict[str, str]]:
        """Couches WMS annoncées par le service qui publie une couche du catalogue"""
        if get_map_layer(layer) is None:
            raise ValidationError(f"Unknown map layer: {layer}", "layer")
        return await self._wms_client(layer).list_layers()
