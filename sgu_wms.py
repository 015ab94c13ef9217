"""
Client WMS pour les services cartographiques SGU.
Supporte WMS 1.1.1 (anciens services) et 1.3.0 (par défaut).

Différences entre versions, isolées dans WMS_VERSION_RULES :
- nom du paramètre de projection : SRS (1.1.1) / CRS (1.3.0)
- ordre des axes de BBOX : minX,minY,maxX,maxY (1.1.1) / minY,minX,maxY,maxX
  (1.3.0, EPSG:3006 déclare le nord en premier)
- coordonnées pixel de GetFeatureInfo : X/Y (1.1.1) / I/J (1.3.0)
"""

import logging
import xml.etree.ElementTree as ET
from typing import Any, Dict, List, Optional, Sequence
from urllib.parse import urlencode

import httpx

from sgu_errors import UpstreamApiError
from sgu_geometry import CRS_SWEREF99TM, BoundingBox, format_number
from sgu_http import DEFAULT_TIMEOUT, HttpClient


logger = logging.getLogger(__name__)

DEFAULT_WMS_VERSION = "1.3.0"

WMS_VERSION_RULES = {
    "1.1.1": {"crs_param": "SRS", "axis_order": "xy", "pixel_params": ("X", "Y")},
    "1.3.0": {"crs_param": "CRS", "axis_order": "yx", "pixel_params": ("I", "J")},
}

NAMESPACES = {
    "wms": "http://www.opengis.net/wms",
}

FEATURE_INFO_ERROR = (
    "Failed to query geological data at this location. "
    "The data service may be temporarily unavailable; try again."
)


class WmsClient:
    """Client WMS configuré une fois pour une URL et une version"""

    def __init__(
        self,
        base_url: str,
        version: str = DEFAULT_WMS_VERSION,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        if version not in WMS_VERSION_RULES:
            raise ValueError(f"Unsupported WMS version: {version}")
        self.base_url = base_url.rstrip("?")
        self.version = version
        self._rules = WMS_VERSION_RULES[version]
        self._http = HttpClient(self.base_url, timeout=timeout, transport=transport)

    def _base_params(self, request: str) -> Dict[str, Any]:
        return {
            "SERVICE": "WMS",
            "VERSION": self.version,
            "REQUEST": request,
        }

    def _spatial_params(self, bbox: BoundingBox, crs: str) -> Dict[str, str]:
        if self._rules["axis_order"] == "xy":
            corners = (bbox.min_x, bbox.min_y, bbox.max_x, bbox.max_y)
        else:
            corners = (bbox.min_y, bbox.min_x, bbox.max_y, bbox.max_x)
        return {
            self._rules["crs_param"]: crs,
            "BBOX": ",".join(format_number(v) for v in corners),
        }

    def _url(self, params: Dict[str, Any]) -> str:
        return f"{self.base_url}?{urlencode(params)}"

    def get_map_url(
        self,
        layers: Sequence[str],
        bbox: BoundingBox,
        width: int = 800,
        height: int = 600,
        format: str = "image/png",
        crs: str = CRS_SWEREF99TM,
        transparent: bool = True,
    ) -> str:
        """Génère l'URL GetMap (l'image n'est jamais téléchargée)"""
        params = {
            **self._base_params("GetMap"),
            "LAYERS": ",".join(layers),
            "STYLES": "",
            "WIDTH": width,
            "HEIGHT": height,
            "FORMAT": format,
            "TRANSPARENT": str(transparent).lower(),
            **self._spatial_params(bbox, crs),
        }
        return self._url(params)

    def get_legend_url(self, layer: str, format: str = "image/png") -> str:
        """Génère l'URL GetLegendGraphic d'une couche"""
        params = {
            **self._base_params("GetLegendGraphic"),
            "LAYER": layer,
            "FORMAT": format,
        }
        return self._url(params)

    async def get_feature_info(
        self,
        layers: Sequence[str],
        bbox: BoundingBox,
        width: int,
        height: int,
        x: int,
        y: int,
        info_format: str = "application/json",
        crs: str = CRS_SWEREF99TM,
    ) -> Dict[str, Any]:
        """
        Interroge le pixel (x, y) d'une image width x height couvrant bbox.

        Toute erreur est remontée en UpstreamApiError avec un message générique ;
        le détail technique est seulement journalisé.
        """
        i_param, j_param = self._rules["pixel_params"]
        params = {
            **self._base_params("GetFeatureInfo"),
            "LAYERS": ",".join(layers),
            "QUERY_LAYERS": ",".join(layers),
            "STYLES": "",
            "WIDTH": width,
            "HEIGHT": height,
            "INFO_FORMAT": info_format,
            **self._spatial_params(bbox, crs),
            i_param: x,
            j_param: y,
        }

        try:
            response = await self._http.request("", params=params)
        except UpstreamApiError as exc:
            logger.warning("GetFeatureInfo failed on %s: %s", self.base_url, exc.message)
            raise UpstreamApiError(FEATURE_INFO_ERROR, exc.status_code, self.base_url) from exc

        # Un ServiceExceptionReport XML peut arriver avec un statut 200
        if not isinstance(response, dict):
            logger.warning("GetFeatureInfo on %s returned a non-JSON document", self.base_url)
            raise UpstreamApiError(FEATURE_INFO_ERROR, 0, self.base_url)
        return response

    async def get_capabilities(self) -> str:
        """Document GetCapabilities brut (XML)"""
        return await self._http.request("", params=self._base_params("GetCapabilities"))

    async def list_layers(self) -> List[Dict[str, str]]:
        """Liste les couches nommées annoncées par le service"""
        document = await self.get_capabilities()
        try:
            root = ET.fromstring(document)
        except (ET.ParseError, TypeError) as exc:
            raise UpstreamApiError(
                "The SGU map service returned an unreadable capabilities document. Try again.",
                0,
                self.base_url,
            ) from exc

        # 1.3.0 : éléments dans l'espace de noms WMS ; 1.1.1 : sans espace de noms
        prefix = "wms:" if root.tag.startswith("{") else ""
        layers = []
        for layer in root.iter(f"{{{NAMESPACES['wms']}}}Layer" if prefix else "Layer"):
            name_elem = layer.find(f"{prefix}Name", NAMESPACES)
            title_elem = layer.find(f"{prefix}Title", NAMESPACES)
            abstract_elem = layer.find(f"{prefix}Abstract", NAMESPACES)

            if name_elem is not None:
                layers.append({
                    "name": name_elem.text,
                    "title": title_elem.text if title_elem is not None else "",
                    "abstract": abstract_elem.text if abstract_elem is not None else "",
                })

        return layers
