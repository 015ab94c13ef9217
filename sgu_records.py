"""
Mise en forme des réponses SGU en enregistrements stables.

Les noms de champs varient selon les millésimes des données (majuscules,
suffixes _tx, anciens noms). Pour chaque type d'enregistrement, POINT_FIELDS
liste les noms candidats par ordre de priorité ; le premier non vide gagne.
"""

from typing import Any, Callable, Dict, Mapping, Optional, Sequence

from shapely.geometry import shape


POINT_FIELDS: Dict[str, Dict[str, Sequence[str]]] = {
    "bedrock": {
        "rock_type": ("Bergart", "bergart_tx", "bergart"),
        "geological_unit": ("Geologisk_enhet", "geo_enh_tx", "geologisk_enhet"),
        "lithology": ("Litologi", "lito_n_tx", "litologi"),
        "tectonic_unit": ("Tektonisk_enhet", "tekt_n_tx", "tektonisk_enhet"),
        "age": ("Alder", "alder_tx", "ald_n_tx", "alder"),
    },
    "soil_type": {
        "soil_type": ("Jordart", "grundlager", "jordart_tx", "jordart"),
        "underlying_layer": ("Underlag", "underlag"),
        "thin_surface_layer": ("Tunt_ytlager", "tunt_ytlager"),
        "landform": ("Landform", "landform"),
        "boulder_coverage": ("Blockighet", "blockighet"),
    },
    "boulder_coverage": {
        "boulder_coverage": ("Blockighet", "blockighet_tx", "blockighet"),
        "soil_type": ("Jordart", "jordart_tx", "jordart"),
    },
    "soil_depth": {
        # GRAY_INDEX : valeur brute d'un raster GeoServer
        "depth_m": ("Jorddjup", "jorddjup", "djup", "GRAY_INDEX"),
        "depth_class": ("Jorddjupsklass", "klass_tx", "klass"),
    },
    "groundwater": {
        "aquifer_type": ("Magasinstyp", "magtyp_tx", "typ"),
        "soil_layer": ("Jordart", "jordart_tx", "jordart"),
        "capacity": ("Uttagsmojlighet", "kapacitet_tx", "kapacitet", "uttag"),
        "name": ("Namn", "namn"),
    },
    "groundwater_vulnerability": {
        "vulnerability": ("Sarbarhet", "sarbarhet_tx", "sarbarhet", "klass"),
        "description": ("Beskrivning", "beskrivning"),
    },
    "landslide": {
        "landslide_type": ("Skredtyp", "skredtyp_tx", "skredtyp", "typ"),
        "date": ("Datum", "datum", "ar"),
        "area_m2": ("Area", "area", "geom_area"),
        "description": ("Beskrivning", "beskrivning"),
    },
    "radon_risk": {
        "uranium_ppm": ("Uran", "uran_ppm", "uran", "GRAY_INDEX"),
        "gamma_radiation": ("Gammastralning", "gamma", "total_gamma"),
    },
    "well": {
        "well_id": ("Brunnsid", "brunnsid", "obsplatsid"),
        "municipality": ("Kommunnamn", "kommunnamn"),
        "property": ("Fastighet", "fastighet"),
        "locality": ("Ort", "ort"),
        "drill_date": ("Borrdatum", "borrdatum"),
        "total_depth_m": ("Totaldjup", "totaldjup"),
        "soil_depth_m": ("Jorddjup", "jorddjup"),
        "water_capacity_ls": ("Kapacitet", "kapacitet"),
        "groundwater_level_m": ("Grundvattenniva", "grundvattenniva"),
        "usage": ("Anvandning", "anvandning"),
    },
}

# Seuils d'uranium (ppm) : < 2 faible, < 4 normal, au-delà élevé
RADON_THRESHOLDS = ((2.0, "low"), (4.0, "normal"))


def first_value(properties: Mapping[str, Any], candidates: Sequence[str]) -> Any:
    """Premier champ candidat présent et non vide"""
    for name in candidates:
        value = properties.get(name)
        if value is not None and value != "":
            return value
    return None


def _first_feature(response: Mapping[str, Any]) -> Optional[Dict[str, Any]]:
    features = response.get("features") or []
    return features[0] if features else None


def _pick_fields(properties: Mapping[str, Any], record_type: str) -> Dict[str, Any]:
    return {
        field: first_value(properties, candidates)
        for field, candidates in POINT_FIELDS[record_type].items()
    }


def _to_float(value: Any) -> Optional[float]:
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def radon_risk_level(uranium_ppm: Optional[float]) -> Optional[str]:
    if uranium_ppm is None:
        return None
    for limit, level in RADON_THRESHOLDS:
        if uranium_ppm < limit:
            return level
    return "high"


def shape_soil_type(properties: Mapping[str, Any]) -> Dict[str, Any]:
    fields = _pick_fields(properties, "soil_type")
    soil_type = fields.pop("soil_type")
    return {
        "surface_layer": soil_type,
        **fields,
        "raw_soil_type": soil_type,
    }


def shape_radon_risk(properties: Mapping[str, Any]) -> Dict[str, Any]:
    fields = _pick_fields(properties, "radon_risk")
    uranium = _to_float(fields["uranium_ppm"])
    fields["uranium_ppm"] = uranium
    fields["risk_level"] = radon_risk_level(uranium)
    return fields


def shape_well(properties: Mapping[str, Any]) -> Dict[str, Any]:
    fields = _pick_fields(properties, "well")
    if fields["drill_date"] is not None:
        fields["drill_date"] = str(fields["drill_date"])
    easting = first_value(properties, ("E", "e"))
    northing = first_value(properties, ("N", "n"))
    if easting is not None and northing is not None:
        fields["coordinates"] = {"x": easting, "y": northing}
    return fields


def _generic_shaper(record_type: str) -> Callable[[Mapping[str, Any]], Dict[str, Any]]:
    return lambda properties: _pick_fields(properties, record_type)


POINT_SHAPERS: Dict[str, Callable[[Mapping[str, Any]], Dict[str, Any]]] = {
    record_type: _generic_shaper(record_type) for record_type in POINT_FIELDS
}
POINT_SHAPERS.update({
    "soil_type": shape_soil_type,
    "radon_risk": shape_radon_risk,
    "well": shape_well,
})


def shape_point_record(record_type: str, response: Mapping[str, Any]) -> Optional[Dict[str, Any]]:
    """
    Enregistrement issu d'une réponse GetFeatureInfo, ou None si aucune
    entité n'est présente au point interrogé.
    """
    feature = _first_feature(response)
    if feature is None:
        return None
    return POINT_SHAPERS[record_type](feature.get("properties") or {})


def geometry_to_wkt(geometry: Optional[Mapping[str, Any]]) -> Optional[str]:
    if not geometry:
        return None
    return shape(geometry).wkt


def shape_bedrock_feature(feature: Mapping[str, Any]) -> Dict[str, Any]:
    """Entité berggrund (OGC API Features) -> enregistrement de sortie"""
    props = feature.get("properties") or {}
    feature_id = feature.get("id")
    return {
        "id": str(feature_id if feature_id is not None else props.get("objectid")),
        "rock_type": props.get("bergart_tx") or "Unknown",
        "geological_unit": props.get("geo_enh_tx") or "Unknown",
        "lithology": props.get("lito_n_tx") or "Unknown",
        "tectonic_unit": props.get("tekt_n_tx") or "Unknown",
        "rock_properties": props.get("b_prop_tx"),
        "area_m2": props.get("geom_area"),
        "geometry_wkt": geometry_to_wkt(feature.get("geometry")),
    }
