"""
Map OpenStreetMap tags onto the visitor-facing POI category
"""

from typing import Callable, Dict, List, Tuple
from models.base import Category

# Tag keys kept on the POI as "key:value" strings
OSM_TAG_KEYS = ("tourism", "historic", "amenity", "building", "leisure")

RELIGIOUS_BUILDINGS = frozenset({"church", "cathedral", "chapel", "mosque", "synagogue", "temple"})

Rule = Tuple[str, Callable[[Dict[str, str]], bool], Category]

# Evaluated top to bottom, first match wins.
CATEGORY_RULES: List[Rule] = [
    ("museum", lambda tags: tags.get("tourism") == "museum", Category.MUSEES),
    ("arts_centre", lambda tags: tags.get("amenity") == "arts_centre", Category.MUSEES),
    ("artwork", lambda tags: tags.get("tourism") == "artwork", Category.ART),
    ("gallery", lambda tags: tags.get("tourism") == "gallery", Category.ART),
    ("historic", lambda tags: bool(tags.get("historic")), Category.MONUMENTS),
    ("religious_building", lambda tags: tags.get("building") in RELIGIOUS_BUILDINGS, Category.MONUMENTS),
    ("place_of_worship", lambda tags: tags.get("amenity") == "place_of_worship", Category.MONUMENTS),
    ("leisure", lambda tags: bool(tags.get("leisure")), Category.AUTRE),
    ("viewpoint", lambda tags: tags.get("tourism") == "viewpoint", Category.INSOLITE),
]


def map_category(tags: Dict[str, str]) -> Category:
    """Return the category of the first rule matching the tags, else Autre."""
    for _name, matches, category in CATEGORY_RULES:
        if matches(tags):
            return category
    return Category.AUTRE


def extract_osm_tags(tags: Dict[str, str]) -> List[str]:
    return [f"{key}:{tags[key]}" for key in OSM_TAG_KEYS if tags.get(key)]
