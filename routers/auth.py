"""
Login and the authenticated user's own account.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException

from database import USERS, DocumentStore, serialize, utcnow
from dependencies import RequestPayload, get_store, read_payload
from normalize import normalize_fields
from routers.common import success
from schemas import LoginRequest, PasswordChange, Token
from security import create_access_token, get_current_user, hash_password, verify_password
from settings import Settings, get_settings

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login")
def login(
    payload: RequestPayload = Depends(read_payload),
    store: DocumentStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
):
    data = LoginRequest.model_validate(normalize_fields(payload.fields))
    user = store.find_one(USERS, {"email": data.email.strip().lower()})
    if (
        not user
        or not user.get("is_active", True)
        or not verify_password(data.password, user["password_hash"])
    ):
        logger.warning("Failed login for %s", data.email)
        raise HTTPException(status_code=401, detail="Invalid credentials")

    user = store.update(USERS, user["_id"], {"last_login": utcnow()})
    token = Token(access_token=create_access_token({"sub": str(user["_id"])}, settings))
    return success({**token.model_dump(), "user": serialize(user)})


@router.get("/me")
def me(user: dict = Depends(get_current_user)):
    return success(serialize(user))


@router.put("/password")
def change_password(
    user: dict = Depends(get_current_user),
    payload: RequestPayload = Depends(read_payload),
    store: DocumentStore = Depends(get_store),
):
    data = PasswordChange.model_validate(normalize_fields(payload.fields))
    if not verify_password(data.current_password, user["password_hash"]):
        raise HTTPException(status_code=400, detail="Current password is incorrect")
    store.update(USERS, user["_id"], {"password_hash": hash_password(data.new_password)})
    return success(message="Password updated successfully")
