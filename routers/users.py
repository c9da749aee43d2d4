"""
Public profile of the site owner and profile management.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from database import USERS, DocumentStore, serialize
from dependencies import RequestPayload, get_media_client, get_store, read_payload
from media import MediaClient, discard_asset, upload_image
from normalize import normalize_fields
from routers.common import changes_from, get_or_404, success
from schemas import UserUpdate
from security import get_current_user
from settings import Settings, get_settings

router = APIRouter(prefix="/users", tags=["users"])


@router.get("")
def get_profile(store: DocumentStore = Depends(get_store)):
    user = store.find_one(USERS, {"is_active": True}, sort=[("created_at", 1)])
    if not user:
        raise HTTPException(status_code=404, detail="User profile not found")
    return success(serialize(user))


@router.put("/{user_id}")
def update_profile(
    user_id: str,
    current: dict = Depends(get_current_user),
    payload: RequestPayload = Depends(read_payload),
    store: DocumentStore = Depends(get_store),
):
    user = get_or_404(store, USERS, user_id, "User")
    if user["_id"] != current["_id"]:
        raise HTTPException(status_code=403, detail="Not authorized to update this profile")

    changes = changes_from(UserUpdate.model_validate(normalize_fields(payload.fields)))
    email = changes.get("email")
    if email and email != user["email"]:
        if store.find_one(USERS, {"email": email, "_id": {"$ne": user["_id"]}}):
            raise HTTPException(status_code=400, detail="Email already exists")
    return success(serialize(store.update(USERS, user["_id"], changes)))


@router.post("/upload-avatar")
def upload_avatar(
    current: dict = Depends(get_current_user),
    payload: RequestPayload = Depends(read_payload),
    store: DocumentStore = Depends(get_store),
    media: MediaClient = Depends(get_media_client),
    settings: Settings = Depends(get_settings),
):
    # "cover" is the field name older admin panels post.
    image = payload.file("avatar", "cover")
    if image is None:
        raise HTTPException(status_code=400, detail="No image uploaded")

    asset = upload_image(media, image, settings.media_folder, settings.max_upload_bytes)
    store.update(USERS, current["_id"], {"profile_picture": asset})
    discard_asset(media, current.get("profile_picture"))
    return success({"profile_picture": asset})


@router.delete("/delete-avatar")
def delete_avatar(
    current: dict = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
    media: MediaClient = Depends(get_media_client),
):
    discard_asset(media, current.get("profile_picture"))
    store.update(USERS, current["_id"], {"profile_picture": {"url": "", "public_id": ""}})
    return success(message="Avatar deleted successfully")
