"""
Experience routes.
"""

from __future__ import annotations

import math
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pymongo.errors import PyMongoError

from database import EXPERIENCES, DocumentStore, serialize
from dependencies import RequestPayload, get_media_client, get_store, read_payload
from media import MediaClient, discard_asset, upload_image
from normalize import normalize_experience
from routers.common import changes_from, get_or_404, success
from schemas import ExperienceCreate, ExperienceUpdate
from security import get_current_user
from settings import Settings, get_settings

router = APIRouter(prefix="/experiences", tags=["experiences"])


def _utc(value: datetime) -> datetime:
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


def _plural(n: int, unit: str) -> str:
    return f"{n} {unit}{'s' if n != 1 else ''}"


def describe_duration(
    start: datetime, end: Optional[datetime] = None, now: Optional[datetime] = None
) -> str:
    """Human readable span, using 30-day months and 12-month years."""
    end = _utc(end) if end else (now or datetime.now(timezone.utc))
    days = math.ceil(abs((end - _utc(start)).total_seconds()) / 86400)
    months = days // 30
    years = months // 12
    if years:
        remaining = months % 12
        text = _plural(years, "year")
        return f"{text} {_plural(remaining, 'month')}" if remaining else text
    if months:
        return _plural(months, "month")
    return _plural(days, "day")


def present(experience: dict) -> dict:
    data = serialize(experience)
    if experience.get("start_date"):
        data["duration"] = describe_duration(experience["start_date"], experience.get("end_date"))
    return data


def _icon_folder(settings: Settings) -> str:
    return f"{settings.media_folder}/icons"


@router.get("")
def list_experiences(store: DocumentStore = Depends(get_store)):
    experiences = store.find(EXPERIENCES, {"is_published": True}, sort=[("start_date", -1)])
    return success([present(e) for e in experiences])


@router.get("/{experience_id}")
def get_experience(experience_id: str, store: DocumentStore = Depends(get_store)):
    experience = get_or_404(store, EXPERIENCES, experience_id, "Experience", is_published=True)
    return success(present(experience))


@router.post("", status_code=201)
def create_experience(
    _user: dict = Depends(get_current_user),
    payload: RequestPayload = Depends(read_payload),
    store: DocumentStore = Depends(get_store),
    media: MediaClient = Depends(get_media_client),
    settings: Settings = Depends(get_settings),
):
    document = ExperienceCreate.model_validate(normalize_experience(payload.fields)).model_dump()
    icon = payload.file("icon")
    if icon is not None:
        document["icon"] = upload_image(media, icon, _icon_folder(settings), settings.max_upload_bytes)
    created = store.create(EXPERIENCES, document)
    return success(present(created))


@router.put("/{experience_id}")
def update_experience(
    experience_id: str,
    _user: dict = Depends(get_current_user),
    payload: RequestPayload = Depends(read_payload),
    store: DocumentStore = Depends(get_store),
    media: MediaClient = Depends(get_media_client),
    settings: Settings = Depends(get_settings),
):
    experience = get_or_404(store, EXPERIENCES, experience_id, "Experience")
    changes = changes_from(
        ExperienceUpdate.model_validate(normalize_experience(payload.fields)),
        nullable=("end_date",),
    )
    if changes.get("is_current"):
        changes["end_date"] = None
    elif changes.get("end_date") is not None and "is_current" not in changes:
        changes["is_current"] = False

    start = changes.get("start_date", experience.get("start_date"))
    end = changes.get("end_date", experience.get("end_date"))
    if start and end and _utc(end) < _utc(start):
        raise HTTPException(status_code=400, detail="End date cannot be before start date")

    icon = payload.file("icon")
    if icon is not None:
        changes["icon"] = upload_image(media, icon, _icon_folder(settings), settings.max_upload_bytes)

    try:
        updated = store.update(EXPERIENCES, experience["_id"], changes)
    except PyMongoError:
        discard_asset(media, changes.get("icon"))
        raise
    if icon is not None:
        discard_asset(media, experience.get("icon"))
    return success(present(updated))


@router.delete("/{experience_id}")
def delete_experience(
    experience_id: str,
    _user: dict = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
    media: MediaClient = Depends(get_media_client),
):
    experience = get_or_404(store, EXPERIENCES, experience_id, "Experience")
    discard_asset(media, experience.get("icon"))
    store.delete(EXPERIENCES, experience["_id"])
    return success(message="Experience deleted successfully")
