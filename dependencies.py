"""
Dependency wiring for the FastAPI app.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from fastapi import Depends, HTTPException, Request
from pymongo import MongoClient
from pymongo.errors import PyMongoError
from starlette.datastructures import UploadFile

from database import DatabaseUnavailable, DocumentStore, connect, ensure_indexes
from media import (
    CloudinaryMediaClient,
    InMemoryMediaClient,
    MediaClient,
    UploadedImage,
    file_too_large,
)
from settings import Settings, get_settings

logger = logging.getLogger(__name__)

_mongo_client: MongoClient | None = None
_store: DocumentStore | None = None
_media_client: MediaClient | None = None


def get_store() -> DocumentStore:
    """
    Return a singleton document store. Indexes are created on first use so a
    database outage surfaces per request instead of at import time.
    """
    global _mongo_client, _store
    if _store is not None:
        return _store

    settings = get_settings()
    client = connect(settings)
    store = DocumentStore(client[settings.database_name])
    try:
        ensure_indexes(store)
    except PyMongoError as exc:
        client.close()
        raise DatabaseUnavailable(str(exc)) from exc
    logger.info("Connected to MongoDB database %s", settings.database_name)
    _mongo_client, _store = client, store
    return _store


def get_media_client() -> MediaClient:
    global _media_client
    if _media_client is not None:
        return _media_client

    settings = get_settings()
    if settings.use_in_memory_backends or not settings.media_configured:
        logger.warning("Cloudinary is not configured, using in-memory media storage")
        _media_client = InMemoryMediaClient()
    else:
        _media_client = CloudinaryMediaClient(
            cloud_name=settings.cloudinary_cloud_name or "",
            api_key=settings.cloudinary_api_key or "",
            api_secret=settings.cloudinary_api_secret or "",
        )
    return _media_client


def close_connections() -> None:
    global _mongo_client, _store
    if _mongo_client is not None:
        _mongo_client.close()
    _mongo_client, _store = None, None


@dataclass
class RequestPayload:
    """Fields and image files of a write request, JSON or multipart."""

    fields: Dict[str, Any] = field(default_factory=dict)
    files: Dict[str, List[UploadedImage]] = field(default_factory=dict)

    def file(self, *names: str) -> Optional[UploadedImage]:
        for name in names:
            uploads = self.files.get(name)
            if uploads:
                return uploads[0]
        return None


async def read_upload(upload: UploadFile, max_bytes: int) -> UploadedImage:
    """Read an uploaded file, refusing anything larger than ``max_bytes``."""
    if upload.size is not None and upload.size > max_bytes:
        raise file_too_large(max_bytes)
    data = await upload.read(max_bytes + 1)
    if len(data) > max_bytes:
        raise file_too_large(max_bytes)
    return UploadedImage(
        filename=upload.filename or "",
        content_type=upload.content_type or "",
        data=data,
    )


async def read_payload(
    request: Request, settings: Settings = Depends(get_settings)
) -> RequestPayload:
    content_type = request.headers.get("content-type", "").lower()
    payload = RequestPayload()

    if content_type.startswith(("multipart/form-data", "application/x-www-form-urlencoded")):
        form = await request.form()
        for key, value in form.multi_items():
            if isinstance(value, UploadFile):
                if not value.filename:
                    continue
                payload.files.setdefault(key, []).append(
                    await read_upload(value, settings.max_upload_bytes)
                )
            elif key in payload.fields:
                existing = payload.fields[key]
                if not isinstance(existing, list):
                    existing = [existing]
                payload.fields[key] = existing + [value]
            else:
                payload.fields[key] = value
        return payload

    body = await request.body()
    if not body.strip():
        return payload
    try:
        data = await request.json()
    except ValueError:
        raise HTTPException(status_code=400, detail="Request body must be valid JSON")
    if not isinstance(data, dict):
        raise HTTPException(status_code=400, detail="Request body must be a JSON object")
    payload.fields = data
    return payload
