"""
Certification routes.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from pymongo.errors import PyMongoError

from database import CERTIFICATIONS, DocumentStore, serialize
from dependencies import RequestPayload, get_media_client, get_store, read_payload
from media import MediaClient, discard_asset, upload_image
from normalize import normalize_certification
from routers.common import changes_from, get_or_404, success
from schemas import CertificationCreate, CertificationUpdate
from security import get_current_user
from settings import Settings, get_settings

router = APIRouter(prefix="/certifications", tags=["certifications"])


@router.get("")
def list_certifications(store: DocumentStore = Depends(get_store)):
    certifications = store.find(
        CERTIFICATIONS, {"is_published": True}, sort=[("date", -1), ("order", 1)]
    )
    return success([serialize(c) for c in certifications])


@router.get("/{certification_id}")
def get_certification(certification_id: str, store: DocumentStore = Depends(get_store)):
    certification = get_or_404(
        store, CERTIFICATIONS, certification_id, "Certification", is_published=True
    )
    return success(serialize(certification))


@router.post("", status_code=201)
def create_certification(
    _user: dict = Depends(get_current_user),
    payload: RequestPayload = Depends(read_payload),
    store: DocumentStore = Depends(get_store),
    media: MediaClient = Depends(get_media_client),
    settings: Settings = Depends(get_settings),
):
    document = CertificationCreate.model_validate(
        normalize_certification(payload.fields)
    ).model_dump()
    logo = payload.file("logo")
    if logo is not None:
        document["logo"] = upload_image(media, logo, settings.media_folder, settings.max_upload_bytes)
    return success(serialize(store.create(CERTIFICATIONS, document)))


@router.put("/{certification_id}")
def update_certification(
    certification_id: str,
    _user: dict = Depends(get_current_user),
    payload: RequestPayload = Depends(read_payload),
    store: DocumentStore = Depends(get_store),
    media: MediaClient = Depends(get_media_client),
    settings: Settings = Depends(get_settings),
):
    certification = get_or_404(store, CERTIFICATIONS, certification_id, "Certification")
    changes = changes_from(
        CertificationUpdate.model_validate(normalize_certification(payload.fields))
    )
    logo = payload.file("logo")
    if logo is not None:
        changes["logo"] = upload_image(media, logo, settings.media_folder, settings.max_upload_bytes)

    try:
        updated = store.update(CERTIFICATIONS, certification["_id"], changes)
    except PyMongoError:
        discard_asset(media, changes.get("logo"))
        raise
    if logo is not None:
        discard_asset(media, certification.get("logo"))
    return success(serialize(updated))


@router.delete("/{certification_id}")
def delete_certification(
    certification_id: str,
    _user: dict = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
    media: MediaClient = Depends(get_media_client),
):
    certification = get_or_404(store, CERTIFICATIONS, certification_id, "Certification")
    discard_asset(media, certification.get("logo"))
    store.delete(CERTIFICATIONS, certification["_id"])
    return success(message="Certification deleted successfully")
