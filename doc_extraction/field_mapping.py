"""Map Document AI entities onto the extracted-field names used by the app."""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

import yaml

logger = logging.getLogger(__name__)

MAPPING_PATH = Path(__file__).resolve().parent / "w2_fields.yaml"


def _validate_mapping(raw: Dict[str, Any]) -> None:
    entities = raw.get("entities")
    if not isinstance(entities, dict) or not entities:
        raise ValueError("Field mapping must define a non-empty 'entities' mapping.")
    markers = raw.get("monetary_markers", [])
    if not isinstance(markers, list):
        raise ValueError("'monetary_markers' must be a list.")


@lru_cache(maxsize=1)
def load_field_mapping() -> Dict[str, Any]:
    """
    Load the entity mapping from w2_fields.yaml.

    Returns a dict with keys:
      - "entities": lowercase entity type -> field name
      - "monetary_markers": list of substrings flagging money fields
    """
    if not MAPPING_PATH.exists():
        raise FileNotFoundError(f"Field mapping not found at {MAPPING_PATH}")
    with MAPPING_PATH.open("r", encoding="utf-8") as handle:
        raw = yaml.safe_load(handle) or {}
    _validate_mapping(raw)
    return {
        "entities": {str(k).lower(): str(v) for k, v in raw["entities"].items()},
        "monetary_markers": [str(m).lower() for m in raw.get("monetary_markers", [])],
    }


def field_name_for(entity_type: str) -> str:
    return load_field_mapping()["entities"].get(entity_type.lower(), entity_type)


def is_monetary(field_name: str) -> bool:
    lowered = field_name.lower()
    return any(marker in lowered for marker in load_field_mapping()["monetary_markers"])


def clean_money(value: str) -> str:
    return value.replace("$", "").replace(",", "").strip()


def _entity_type(entity: Dict[str, Any]) -> Optional[str]:
    return entity.get("type_") or entity.get("type")


def _entity_value(entity: Dict[str, Any]) -> Optional[str]:
    normalized = entity.get("normalized_value") or {}
    if isinstance(normalized, dict) and normalized.get("text"):
        return str(normalized["text"])
    mention = entity.get("mention_text")
    return str(mention) if mention else None


def map_entities(entities: Iterable[Dict[str, Any]]) -> Dict[str, Any]:
    """Turn Document AI entity dicts into {fieldName: value}; later entities overwrite earlier ones."""
    extracted: Dict[str, Any] = {}
    for entity in entities:
        if not isinstance(entity, dict):
            continue
        etype = _entity_type(entity)
        if not etype or not entity.get("mention_text"):
            continue
        field_name = field_name_for(etype)
        value = _entity_value(entity)
        if value and is_monetary(field_name):
            value = clean_money(value)
        extracted[field_name] = value
    logger.info("Mapped %d entities to fields: %s", len(extracted), sorted(extracted))
    return extracted


def first_entity_confidence(entities: List[Dict[str, Any]], default: float = 0.9) -> float:
    if entities and isinstance(entities[0], dict):
        conf = entities[0].get("confidence")
        if conf:
            return float(conf)
    return default


__all__ = ["clean_money", "field_name_for", "first_entity_confidence", "is_monetary", "load_field_mapping", "map_entities"]
