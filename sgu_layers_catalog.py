"""
Catalogue des couches SGU (Sveriges geologiska undersökning)
Source : https://www.sgu.se/produkter-och-tjanster/geologiska-data/

Table statique, en lecture seule, initialisée au chargement du module :
nom logique -> point d'accès, identifiants de couches WMS, version WMS.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, List, Optional, Tuple


# Points d'accès
SGU_OGC_BEDROCK_URL = "https://api.sgu.se/oppnadata/berggrund50k-250k/ogc/features/v1"
SGU_OGC_BEDROCK_COLLECTION = "geologisk-enhet-yta"

# Points d'accès GetMap (différents de ceux de GetCapabilities)
SGU_WMS_BEDROCK_URL = "https://maps3.sgu.se/geoserver/berg/ows"
SGU_WMS_SOIL_URL = "https://maps3.sgu.se/geoserver/jord/ows"
SGU_WMS_GROUNDWATER_URL = "https://maps3.sgu.se/geoserver/ows"
# Ancien serveur, WMS 1.1.1 uniquement
SGU_WMS_LEGACY_URL = "https://maps.sgu.se/geoserver/wms"


@dataclass(frozen=True)
class LayerDescriptor:
    name: str
    url: str
    layers: Tuple[str, ...]
    version: str
    title: str
    description: str


@dataclass(frozen=True)
class PointQuery:
    data_type: str
    map_layer: str
    title: str
    description: str
    use_case: str


MAP_LAYERS = MappingProxyType({
    # === BERGGRUND ===
    "bedrock": LayerDescriptor(
        name="bedrock",
        url=SGU_WMS_BEDROCK_URL,
        layers=("SE.GOV.SGU.BERG.GEOLOGISK_ENHET.YTA.50K",),
        version="1.3.0",
        title="Bedrock map",
        description="Geological map showing rock types and formations.",
    ),

    # === JORDARTER ===
    "soil_types": LayerDescriptor(
        name="soil_types",
        url=SGU_WMS_SOIL_URL,
        layers=("SE.GOV.SGU.JORD.GRUNDLAGER.25K",),
        version="1.3.0",
        title="Soil types map",
        description="Surface soil classification across an area.",
    ),
    "boulder_coverage": LayerDescriptor(
        name="boulder_coverage",
        url=SGU_WMS_SOIL_URL,
        layers=("SE.GOV.SGU.JORD.BLOCKIGHET.25K",),
        version="1.3.0",
        title="Boulder coverage map",
        description="Spatial distribution of boulder density.",
    ),
    "soil_depth": LayerDescriptor(
        name="soil_depth",
        url=SGU_WMS_SOIL_URL,
        layers=("SE.GOV.SGU.JORD.JORDDJUP.50K",),
        version="1.3.0",
        title="Soil depth map",
        description="Estimated depth to bedrock across an area.",
    ),
    "landslide": LayerDescriptor(
        name="landslide",
        url=SGU_WMS_SOIL_URL,
        layers=("SE.GOV.SGU.JORD.SKRED",),
        version="1.3.0",
        title="Landslide map",
        description="Historical landslide areas.",
    ),

    # === GRUNDVATTEN ===
    "groundwater": LayerDescriptor(
        name="groundwater",
        url=SGU_WMS_GROUNDWATER_URL,
        layers=("SE.GOV.SGU.HMAG.GRUNDVATTENMAGASIN_J1.V2",),
        version="1.3.0",
        title="Groundwater map",
        description="Aquifer locations and groundwater reservoirs.",
    ),
    "groundwater_vulnerability": LayerDescriptor(
        name="groundwater_vulnerability",
        url=SGU_WMS_GROUNDWATER_URL,
        layers=("SE.GOV.SGU.HMAG.SARBARHET.V1",),
        version="1.3.0",
        title="Groundwater vulnerability map",
        description="Contamination risk zones.",
    ),

    # === ANCIEN SERVEUR (WMS 1.1.1) ===
    "radon_risk": LayerDescriptor(
        name="radon_risk",
        url=SGU_WMS_LEGACY_URL,
        layers=("SE.GOV.SGU.GFYS.FLYG.URAN",),
        version="1.1.1",
        title="Radon risk map",
        description="Gamma radiation levels indicating radon potential.",
    ),
    "wells": LayerDescriptor(
        name="wells",
        url=SGU_WMS_LEGACY_URL,
        layers=("SE.GOV.SGU.BRUNNAR.250K",),
        version="1.1.1",
        title="Wells map",
        description="Registered wells and boreholes.",
    ),
    "gravel_deposits": LayerDescriptor(
        name="gravel_deposits",
        url=SGU_WMS_LEGACY_URL,
        layers=("SE.GOV.SGU.MINERAL.GRUSFOREKOMSTER",),
        version="1.1.1",
        title="Gravel deposits map",
        description="Sand and gravel occurrences for construction materials.",
    ),
    "rock_deposits": LayerDescriptor(
        name="rock_deposits",
        url=SGU_WMS_LEGACY_URL,
        layers=("SE.GOV.SGU.MINERAL.BERGFOREKOMSTER",),
        version="1.1.1",
        title="Rock deposits map",
        description="Crushed rock material sources.",
    ),
})


POINT_QUERIES = MappingProxyType({
    "bedrock": PointQuery(
        data_type="bedrock",
        map_layer="bedrock",
        title="Bedrock geology",
        description="Rock type, age, lithology, and tectonic unit at a specific point.",
        use_case="Foundation design, tunneling, blasting requirements",
    ),
    "soil_type": PointQuery(
        data_type="soil_type",
        map_layer="soil_types",
        title="Soil type",
        description="Surface and subsurface soil layers, landform classification.",
        use_case="Excavation planning, soil stability assessment",
    ),
    "boulder_coverage": PointQuery(
        data_type="boulder_coverage",
        map_layer="boulder_coverage",
        title="Boulder coverage",
        description="Density of boulders and blocks in the soil.",
        use_case="Excavation difficulty, equipment selection",
    ),
    "soil_depth": PointQuery(
        data_type="soil_depth",
        map_layer="soil_depth",
        title="Soil depth",
        description="Estimated depth from surface to bedrock.",
        use_case="Foundation depth planning, pile length estimation",
    ),
    "groundwater": PointQuery(
        data_type="groundwater",
        map_layer="groundwater",
        title="Groundwater",
        description="Aquifer type, soil layer, and water capacity.",
        use_case="Dewatering needs, water supply potential",
    ),
    "groundwater_vulnerability": PointQuery(
        data_type="groundwater_vulnerability",
        map_layer="groundwater_vulnerability",
        title="Groundwater vulnerability",
        description="Risk of groundwater contamination (low/moderate/high).",
        use_case="Environmental impact assessment, permitting",
    ),
    "landslide": PointQuery(
        data_type="landslide",
        map_layer="landslide",
        title="Landslide",
        description="Historical landslide events and affected areas.",
        use_case="Slope stability assessment, risk evaluation",
    ),
    "radon_risk": PointQuery(
        data_type="radon_risk",
        map_layer="radon_risk",
        title="Radon risk",
        description="Gamma radiation and uranium content as radon indicator.",
        use_case="Building ventilation requirements, health assessment",
    ),
    "well": PointQuery(
        data_type="well",
        map_layer="wells",
        title="Well/borehole",
        description="Nearby well data including depth, capacity, and groundwater level.",
        use_case="Groundwater information, existing borehole reference",
    ),
})


def get_map_layer(name: str) -> Optional[LayerDescriptor]:
    """Descripteur d'une couche cartographique"""
    return MAP_LAYERS.get(name)


def get_point_query(data_type: str) -> Optional[PointQuery]:
    """Descripteur d'une interrogation ponctuelle"""
    return POINT_QUERIES.get(data_type)


def describe_layers() -> Dict[str, Dict]:
    """Catalogue lisible par l'agent : interrogations ponctuelles et cartes"""
    return {
        "point_query": {
            key: {"name": q.title, "description": q.description, "use_case": q.use_case}
            for key, q in POINT_QUERIES.items()
        },
        "map": {
            key: {"name": layer.title, "description": layer.description}
            for key, layer in MAP_LAYERS.items()
        },
    }


def get_all_map_layers() -> List[str]:
    return list(MAP_LAYERS.keys())


def get_all_point_data_types() -> List[str]:
    return list(POINT_QUERIES.keys())
