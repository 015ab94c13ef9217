"""
Client OGC API Features pour les données vectorielles SGU (GeoJSON).
"""

import logging
from typing import Any, Dict, List, Optional

import httpx

from sgu_errors import NotFoundError, UpstreamApiError
from sgu_geometry import CRS_SWEREF99TM, BoundingBox, bbox_to_string
from sgu_http import DEFAULT_TIMEOUT, HttpClient


logger = logging.getLogger(__name__)


class OgcFeaturesClient:
    """Client pour un service OGC API Features"""

    def __init__(
        self,
        base_url: str,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url
        self._http = HttpClient(
            base_url,
            timeout=timeout,
            headers={"Accept": "application/geo+json, application/json"},
            transport=transport,
        )

    async def get_items(
        self,
        collection: str,
        bbox: Optional[BoundingBox] = None,
        polygon_wkt: Optional[str] = None,
        limit: int = 100,
        offset: Optional[int] = None,
        crs: str = CRS_SWEREF99TM,
    ) -> List[Dict[str, Any]]:
        """
        Récupère les entités d'une collection.

        Args:
            collection: Identifiant de la collection
            bbox: Emprise de filtrage (ignorée si polygon_wkt est fourni)
            polygon_wkt: Polygone WKT, filtre CQL INTERSECTS
            limit: Nombre max d'entités
            offset: Décalage de pagination
            crs: Projection, forme courte EPSG:nnnn (le service SGU refuse les URN OGC)
        """
        params: Dict[str, Any] = {
            "limit": limit,
            "offset": offset,
            "crs": crs,
            "bbox-crs": crs,
        }

        if polygon_wkt:
            params["filter"] = f"INTERSECTS(geom,{polygon_wkt})"
            params["filter-lang"] = "cql-text"
            params["filter-crs"] = crs
        elif bbox:
            params["bbox"] = bbox_to_string(bbox)

        try:
            response = await self._http.request(f"collections/{collection}/items", params=params)
        except UpstreamApiError:
            raise
        except Exception as exc:
            logger.warning("OGC items request failed on %s: %s", self.base_url, exc)
            raise UpstreamApiError(
                "Failed to fetch features for this area. The data service may be temporarily unavailable; try again.",
                0,
                self.base_url,
            ) from exc

        if not isinstance(response, dict) or not isinstance(response.get("features"), list):
            raise UpstreamApiError(
                "The SGU feature service returned an unexpected response. Try again.",
                0,
                self.base_url,
            )
        return response["features"]

    async def get_collections(self) -> List[Dict[str, Any]]:
        try:
            response = await self._http.request("collections")
        except UpstreamApiError:
            raise
        except Exception as exc:
            logger.warning("OGC collections request failed on %s: %s", self.base_url, exc)
            raise UpstreamApiError(
                "Failed to list feature collections. The data service may be temporarily unavailable; try again.",
                0,
                self.base_url,
            ) from exc

        if not isinstance(response, dict) or not isinstance(response.get("collections", []), list):
            raise UpstreamApiError(
                "The SGU feature service returned an unexpected response. Try again.",
                0,
                self.base_url,
            )
        return [
            {
                "id": c.get("id"),
                "title": c.get("title"),
                "description": c.get("description"),
            }
            for c in response.get("collections", [])
        ]

    async def get_feature(self, collection: str, feature_id: str) -> Dict[str, Any]:
        try:
            return await self._http.request(f"collections/{collection}/items/{feature_id}")
        except UpstreamApiError as exc:
            if exc.status_code == 404:
                raise NotFoundError("Feature", f"{collection}/{feature_id}") from exc
            raise
