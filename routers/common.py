"""
Response envelope and lookup helpers shared by the resource routers.
"""

from __future__ import annotations

import math
from typing import Any, Dict, Iterable, Optional

from fastapi import HTTPException
from pydantic import BaseModel

from database import DocumentStore


def success(data: Any = None, message: Optional[str] = None, **extra: Any) -> Dict[str, Any]:
    body: Dict[str, Any] = {"success": True}
    if message is not None:
        body["message"] = message
    if data is not None:
        body["data"] = data
    body.update(extra)
    return body


def pagination(page: int, limit: int, total: int) -> Dict[str, int]:
    return {
        "current_page": page,
        "total_pages": math.ceil(total / limit) if limit else 0,
        "total_items": total,
        "items_per_page": limit,
    }


def get_or_404(
    store: DocumentStore, collection: str, doc_id: str, label: str, **conditions: Any
) -> Dict[str, Any]:
    document = store.get(collection, doc_id, **conditions)
    if document is None:
        raise HTTPException(status_code=404, detail=f"{label} not found")
    return document


def changes_from(model: BaseModel, nullable: Iterable[str] = ()) -> Dict[str, Any]:
    """
    Top-level fields the client actually sent, each dumped in full so nested
    objects keep every key. ``None`` only survives for nullable fields.
    """
    data = model.model_dump()
    return {
        k: data[k]
        for k in model.model_fields_set
        if data[k] is not None or k in nullable
    }
