"""
Input coercion for write payloads.

Form posts and older clients send the same fields in several shapes: JSON
encoded inside form fields, comma or newline separated strings, camelCase
keys, and links as an object keyed by link type. Everything here turns those
shapes into the canonical snake_case structure that schemas.py validates.
"""

from __future__ import annotations

import json
import re
from typing import Any, Dict, Iterable, List, Optional, Sequence
from urllib.parse import urlparse

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])([A-Z])")

TRUE_VALUES = {"true", "1", "yes", "on"}
FALSE_VALUES = {"false", "0", "no", "off"}

LINK_TYPES = ("github", "demo", "article", "store", "website", "other")
_STORE_HOSTS = ("play.google.com", "apps.apple.com", "itunes.apple.com")


def to_snake(key: str) -> str:
    return _CAMEL_BOUNDARY.sub(r"_\1", key).lower()


def snake_keys(value: Any) -> Any:
    """Recursively rewrite camelCase dict keys to snake_case."""
    if isinstance(value, dict):
        return {to_snake(str(k)): snake_keys(v) for k, v in value.items()}
    if isinstance(value, list):
        return [snake_keys(v) for v in value]
    return value


def parse_json(value: Any) -> Any:
    """Decode strings that look like JSON arrays or objects; pass others through."""
    if isinstance(value, str):
        text = value.strip()
        if text[:1] in ("[", "{"):
            try:
                return json.loads(text)
            except ValueError:
                return value
    return value


def to_list(value: Any, separators: Sequence[str] = (",",)) -> List[Any]:
    """
    Coerce a list-ish value into a list.

    Strings are decoded as JSON when they look like an array; otherwise they
    are split on the first separator that occurs in them. Blank entries are
    dropped and string entries are stripped.
    """
    value = parse_json(value)
    if value is None:
        return []
    if isinstance(value, str):
        items: List[Any] = [value]
        for sep in separators:
            if sep in value:
                items = value.split(sep)
                break
    elif isinstance(value, (list, tuple)):
        items = list(value)
    else:
        items = [value]

    out = []
    for item in items:
        if isinstance(item, str):
            item = item.strip()
            if not item:
                continue
        elif item is None:
            continue
        out.append(item)
    return out


def to_bool(value: Any) -> Any:
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in TRUE_VALUES:
            return True
        if lowered in FALSE_VALUES:
            return False
    # Anything else is left for validation to reject.
    return value


def to_object(value: Any) -> Any:
    return snake_keys(parse_json(value))


def to_tech_stack(value: Any) -> List[Any]:
    items = []
    for item in to_list(value, separators=(",",)):
        if isinstance(item, str):
            items.append({"name": item})
        elif isinstance(item, dict):
            item = snake_keys(item)
            if "name" not in item and "title" in item:
                item["name"] = item.pop("title")
            items.append(item)
        else:
            items.append(item)
    return items


def to_features(value: Any) -> List[Any]:
    items = []
    for item in to_list(value, separators=("\n", ",")):
        if isinstance(item, str):
            items.append({"title": item})
        elif isinstance(item, dict):
            item = snake_keys(item)
            if "title" not in item and "name" in item:
                item["title"] = item.pop("name")
            items.append(item)
        else:
            items.append(item)
    return items


def guess_link_type(url: str) -> str:
    host = urlparse(url).netloc.lower()
    if host.startswith("www."):
        host = host[4:]
    if host == "github.com" or host.endswith(".github.com"):
        return "github"
    if host in _STORE_HOSTS:
        return "store"
    return "other"


def to_links(value: Any) -> List[Any]:
    """
    Coerce project links into ``[{type, url, label?}]``.

    Accepts the legacy ``{"github": url, "demo": url}`` object, a single link
    object, a list of link objects, or bare URLs.
    """
    value = parse_json(value)
    if isinstance(value, dict):
        value = snake_keys(value)
        if "url" in value:
            value = [value]
        else:
            # Legacy shape: one key per link type.
            value = [
                {"type": key if key in LINK_TYPES else "other", "url": url}
                for key, url in value.items()
            ]

    links = []
    for item in to_list(value, separators=(",", "\n")):
        if isinstance(item, str):
            links.append({"type": guess_link_type(item), "url": item})
            continue
        if isinstance(item, dict):
            item = snake_keys(item)
            url = item.get("url")
            if isinstance(url, str):
                url = url.strip()
                if not url:
                    continue
                item["url"] = url
            if not item.get("type"):
                item["type"] = guess_link_type(url) if isinstance(url, str) else "other"
            elif isinstance(item["type"], str):
                item["type"] = item["type"].strip().lower()
        links.append(item)
    return links


def _case_study(value: Any) -> Any:
    value = to_object(value)
    if isinstance(value, dict) and "challenges" in value:
        value["challenges"] = to_list(value["challenges"], separators=("\n",))
    return value


def _drop_blank(data: Dict[str, Any], keys: Iterable[str]) -> Dict[str, Any]:
    """Treat empty strings for non-text fields as "not supplied"."""
    for key in keys:
        if key in data and isinstance(data[key], str) and not data[key].strip():
            del data[key]
    return data


def _apply(data: Dict[str, Any], converters: Dict[str, Any]) -> Dict[str, Any]:
    for key, convert in converters.items():
        if key in data:
            data[key] = convert(data[key])
    return data


def _prepare(raw: Optional[Dict[str, Any]], non_text: Iterable[str]) -> Dict[str, Any]:
    data = snake_keys(dict(raw or {}))
    return _drop_blank(data, non_text)


def normalize_project(raw: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    data = _prepare(
        raw,
        ("tech_stack", "features", "links", "stats", "case_study", "year",
         "is_featured", "is_published", "type"),
    )
    return _apply(
        data,
        {
            "tech_stack": to_tech_stack,
            "features": to_features,
            "links": to_links,
            "stats": to_object,
            "case_study": _case_study,
            "is_featured": to_bool,
            "is_published": to_bool,
        },
    )


def normalize_experience(raw: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    data = _prepare(
        raw,
        ("start_date", "description", "tech", "achievements",
         "is_current", "is_published"),
    )
    # An empty end date on a form means "still there".
    if "end_date" in data and isinstance(data["end_date"], str) and not data["end_date"].strip():
        data["end_date"] = None
    return _apply(
        data,
        {
            "description": lambda v: to_list(v, separators=("\n",)),
            "tech": lambda v: to_list(v, separators=(",",)),
            "achievements": lambda v: to_list(v, separators=("\n",)),
            "is_current": to_bool,
            "is_published": to_bool,
        },
    )


def normalize_skill(raw: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    data = _prepare(raw, ("level", "order", "is_published", "category", "color"))
    return _apply(data, {"is_published": to_bool})


def normalize_certification(raw: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    data = _prepare(raw, ("date", "order", "is_published", "credential_url"))
    return _apply(data, {"is_published": to_bool})


def normalize_social(raw: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    data = _prepare(raw, ("order", "is_active", "color"))
    return _apply(data, {"is_active": to_bool})


def normalize_order_items(raw: Any) -> List[Any]:
    items = []
    for item in to_list(raw):
        if isinstance(item, dict):
            item = snake_keys(item)
            if "id" not in item and "_id" in item:
                item["id"] = item.pop("_id")
        items.append(item)
    return items


def normalize_fields(raw: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Key normalization only, for payloads without list or object fields."""
    return snake_keys(dict(raw or {}))
