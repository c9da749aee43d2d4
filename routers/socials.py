"""
Social link routes.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from database import SOCIALS, DocumentStore, serialize, to_object_id
from dependencies import RequestPayload, get_store, read_payload
from normalize import normalize_fields, normalize_order_items, normalize_social
from routers.common import changes_from, get_or_404, success
from schemas import SocialCreate, SocialOrderRequest, SocialUpdate
from security import get_current_user

router = APIRouter(prefix="/socials", tags=["socials"])


@router.get("")
def list_socials(store: DocumentStore = Depends(get_store)):
    socials = store.find(SOCIALS, {"is_active": True}, sort=[("order", 1)])
    return success([serialize(s) for s in socials])


@router.get("/{social_id}")
def get_social(social_id: str, store: DocumentStore = Depends(get_store)):
    social = get_or_404(store, SOCIALS, social_id, "Social link", is_active=True)
    return success(serialize(social))


@router.post("", status_code=201)
def create_social(
    _user: dict = Depends(get_current_user),
    payload: RequestPayload = Depends(read_payload),
    store: DocumentStore = Depends(get_store),
):
    social = SocialCreate.model_validate(normalize_social(payload.fields))
    return success(serialize(store.create(SOCIALS, social.model_dump())))


@router.put("/order")
def reorder_socials(
    _user: dict = Depends(get_current_user),
    payload: RequestPayload = Depends(read_payload),
    store: DocumentStore = Depends(get_store),
):
    fields = normalize_fields(payload.fields)
    fields["socials"] = normalize_order_items(fields.get("socials"))
    request = SocialOrderRequest.model_validate(fields)
    updated = 0
    for item in request.socials:
        if store.update(SOCIALS, to_object_id(item.id), {"order": item.order}):
            updated += 1
    return success(message="Social links order updated successfully", updated=updated)


@router.put("/{social_id}")
def update_social(
    social_id: str,
    _user: dict = Depends(get_current_user),
    payload: RequestPayload = Depends(read_payload),
    store: DocumentStore = Depends(get_store),
):
    social = get_or_404(store, SOCIALS, social_id, "Social link")
    changes = changes_from(SocialUpdate.model_validate(normalize_social(payload.fields)))
    return success(serialize(store.update(SOCIALS, social["_id"], changes)))


@router.delete("/{social_id}")
def delete_social(
    social_id: str,
    _user: dict = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
):
    social = get_or_404(store, SOCIALS, social_id, "Social link")
    store.delete(SOCIALS, social["_id"])
    return success(message="Social link deleted successfully")
