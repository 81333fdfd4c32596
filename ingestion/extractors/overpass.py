"""
Overpass API Extractor

Fetches tourist-relevant OpenStreetMap elements around a point.
"""

from typing import Any, Dict, List, Optional
import logging

from ingestion.base import HttpSource
from ingestion.transformers.categories import extract_osm_tags
from schemas.poi import RawPoi
from models.base import OsmType
from core.config import settings
from core.exceptions import ExtractionError, GeoQueryError
from pydantic import ValidationError

logger = logging.getLogger(__name__)

POI_TAG_FILTERS: Dict[str, List[str]] = {
    "tourism": ["museum", "artwork", "attraction", "viewpoint", "gallery"],
    "historic": [
        "monument", "memorial", "castle", "ruins", "archaeological_site",
        "church", "cathedral", "palace", "fort", "manor", "tower",
    ],
    "amenity": ["theatre", "arts_centre", "place_of_worship"],
    "building": ["church", "cathedral", "chapel", "mosque", "synagogue", "temple"],
}

OSM_ELEMENT_TYPES = ("node", "way", "relation")


def build_query(lat: float, lng: float, radius_km: float) -> str:
    """
    Overpass QL query for every tag filter and element type.

    Only elements carrying a wikidata tag are requested.
    """
    radius_m = int(round(radius_km * 1000))
    clauses = []
    for key, values in POI_TAG_FILTERS.items():
        pattern = "|".join(values)
        for element_type in OSM_ELEMENT_TYPES:
            clauses.append(
                f'  {element_type}["{key}"~"^({pattern})$"]["wikidata"](around:{radius_m},{lat},{lng});'
            )
    body = "\n".join(clauses)
    return f"[out:json][timeout:60];\n(\n{body}\n);\nout center tags;"


def wikipedia_url_from_tag(tag: Optional[str]) -> Optional[str]:
    """Turn an OSM "lang:Title" wikipedia tag into an article URL."""
    if not tag or not tag.strip():
        return None
    lang, sep, title = tag.strip().partition(":")
    if not sep or not title.strip() or len(lang) > 12 or " " in lang:
        lang, title = "en", tag.strip()
    title = title.strip().replace(" ", "_")
    return f"https://{lang.strip()}.wikipedia.org/wiki/{title}"


class OverpassFetcher(HttpSource):
    """Query Overpass and parse the answer into RawPoi records."""

    service_name = "overpass"
    error_class = GeoQueryError

    def __init__(self, rate_limiter, api_url: Optional[str] = None, **kwargs):
        super().__init__(rate_limiter, **kwargs)
        self.api_url = api_url or settings.OVERPASS_URL

    async def fetch_pois(self, lat: float, lng: float, radius_km: float) -> List[RawPoi]:
        """
        Fetch POIs within radius_km of (lat, lng).

        Raises:
            GeoQueryError: When the query fails or the payload is unusable
        """
        query = build_query(lat, lng, radius_km)
        logger.info(f"Querying Overpass around ({lat}, {lng}) radius {radius_km}km")

        try:
            async with self._client() as client:
                response = await self._request(client, "POST", self.api_url, data={"data": query})
            payload = self._decode_json(response)
        except GeoQueryError:
            raise
        except ExtractionError as e:
            raise GeoQueryError(
                f"Overpass query failed: {e.message}",
                context={"api_url": self.api_url, **e.context},
                original_exception=e
            )

        if not isinstance(payload, dict) or not isinstance(payload.get("elements"), list):
            raise GeoQueryError(
                "Overpass response has no elements array",
                context={"api_url": self.api_url}
            )

        pois = self.parse_elements(payload["elements"])
        logger.info(f"Overpass returned {len(payload['elements'])} elements, kept {len(pois)} POIs")
        return pois

    def parse_elements(self, elements: List[Dict[str, Any]]) -> List[RawPoi]:
        pois: List[RawPoi] = []
        seen = set()

        for element in elements:
            poi = self._parse_element(element)
            if poi is None or poi.osm_id in seen:
                continue
            seen.add(poi.osm_id)
            pois.append(poi)

        return pois

    def _parse_element(self, element: Dict[str, Any]) -> Optional[RawPoi]:
        tags = element.get("tags") or {}
        name = (tags.get("name") or "").strip()
        wikidata = (tags.get("wikidata") or "").strip()
        if not name or not wikidata:
            return None

        lat, lng = element.get("lat"), element.get("lon")
        if lat is None or lng is None:
            center = element.get("center") or {}
            lat, lng = center.get("lat"), center.get("lon")
        if lat is None or lng is None:
            return None

        try:
            osm_type = OsmType(element.get("type"))
            return RawPoi(
                osm_id=f"{osm_type.value[0].upper()}{element['id']}",
                osm_type=osm_type,
                name=name,
                lat=float(lat),
                lng=float(lng),
                tags={str(k): str(v) for k, v in tags.items()},
                osm_tags=extract_osm_tags(tags),
                wikidata_id=wikidata,
                wikipedia_url=wikipedia_url_from_tag(tags.get("wikipedia")),
            )
        except (KeyError, ValueError, ValidationError) as e:
            logger.warning(f"Skipping malformed Overpass element {element.get('type')}/{element.get('id')}: {e}")
            return None
