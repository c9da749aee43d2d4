"""
Contact form submissions and the admin inbox.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Query, Request

from database import CONTACTS, DocumentStore, serialize
from dependencies import RequestPayload, get_store, read_payload
from middleware import client_ip
from normalize import normalize_fields
from notifications import send_contact_notification
from routers.common import get_or_404, pagination, success
from schemas import ContactCreate
from security import get_current_user
from settings import Settings, get_settings

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/contact", tags=["contact"])


@router.post("", status_code=201)
def send_message(
    request: Request,
    background_tasks: BackgroundTasks,
    payload: RequestPayload = Depends(read_payload),
    store: DocumentStore = Depends(get_store),
    settings: Settings = Depends(get_settings),
):
    message = ContactCreate.model_validate(normalize_fields(payload.fields))
    document = {
        **message.model_dump(),
        "ip_address": client_ip(request),
        "user_agent": request.headers.get("user-agent", ""),
        "is_read": False,
        "is_replied": False,
    }
    created = store.create(CONTACTS, document)
    logger.info("Contact message %s from %s", created["_id"], message.email)
    if settings.email_configured:
        background_tasks.add_task(send_contact_notification, settings, dict(document))
    return success(message="Message sent successfully! We will get back to you soon.")


@router.get("")
def list_messages(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    unread: Optional[bool] = None,
    _user: dict = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
):
    query = {"is_read": False} if unread else {}
    total = store.count(CONTACTS, query)
    contacts = store.find(
        CONTACTS, query, sort=[("created_at", -1)], skip=(page - 1) * limit, limit=limit
    )
    return success(
        [serialize(c) for c in contacts], pagination=pagination(page, limit, total)
    )


@router.get("/{contact_id}")
def get_message(
    contact_id: str,
    _user: dict = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
):
    contact = get_or_404(store, CONTACTS, contact_id, "Contact message")
    if not contact.get("is_read"):
        contact = store.update(CONTACTS, contact["_id"], {"is_read": True})
    return success(serialize(contact))


@router.put("/{contact_id}/read")
def mark_read(
    contact_id: str,
    _user: dict = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
):
    contact = get_or_404(store, CONTACTS, contact_id, "Contact message")
    store.update(CONTACTS, contact["_id"], {"is_read": True})
    return success(message="Message marked as read")


@router.put("/{contact_id}/replied")
def mark_replied(
    contact_id: str,
    _user: dict = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
):
    contact = get_or_404(store, CONTACTS, contact_id, "Contact message")
    store.update(CONTACTS, contact["_id"], {"is_replied": True})
    return success(message="Message marked as replied")


@router.delete("/{contact_id}")
def delete_message(
    contact_id: str,
    _user: dict = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
):
    contact = get_or_404(store, CONTACTS, contact_id, "Contact message")
    store.delete(CONTACTS, contact["_id"])
    return success(message="Contact message deleted successfully")
