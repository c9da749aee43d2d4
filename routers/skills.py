"""
Skill routes.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends

from database import SKILLS, DocumentStore, serialize, to_object_id
from dependencies import RequestPayload, get_store, read_payload
from normalize import normalize_fields, normalize_order_items, normalize_skill
from routers.common import changes_from, get_or_404, success
from schemas import SKILL_CATEGORIES, SkillCreate, SkillOrderRequest, SkillUpdate
from security import get_current_user

router = APIRouter(prefix="/skills", tags=["skills"])


@router.get("")
def list_skills(store: DocumentStore = Depends(get_store)):
    skills = store.find(SKILLS, {"is_published": True}, sort=[("category", 1), ("order", 1)])
    grouped: dict = {}
    for skill in skills:
        grouped.setdefault(skill["category"], []).append(serialize(skill))
    return success(grouped)


@router.get("/category/{category}")
def skills_by_category(category: str, store: DocumentStore = Depends(get_store)):
    # Accept "languages" for "Languages".
    match = next((c for c in SKILL_CATEGORIES if c.lower() == category.lower()), category)
    skills = store.find(
        SKILLS, {"category": match, "is_published": True}, sort=[("order", 1), ("level", -1)]
    )
    return success([serialize(s) for s in skills])


@router.get("/{skill_id}")
def get_skill(skill_id: str, store: DocumentStore = Depends(get_store)):
    return success(serialize(get_or_404(store, SKILLS, skill_id, "Skill", is_published=True)))


@router.post("", status_code=201)
def create_skill(
    _user: dict = Depends(get_current_user),
    payload: RequestPayload = Depends(read_payload),
    store: DocumentStore = Depends(get_store),
):
    skill = SkillCreate.model_validate(normalize_skill(payload.fields))
    return success(serialize(store.create(SKILLS, skill.model_dump())))


@router.put("/order")
def reorder_skills(
    _user: dict = Depends(get_current_user),
    payload: RequestPayload = Depends(read_payload),
    store: DocumentStore = Depends(get_store),
):
    fields = normalize_fields(payload.fields)
    fields["skills"] = normalize_order_items(fields.get("skills"))
    request = SkillOrderRequest.model_validate(fields)
    updated = 0
    for item in request.skills:
        if store.update(SKILLS, to_object_id(item.id), {"order": item.order}):
            updated += 1
    return success(message="Skills order updated successfully", updated=updated)


@router.put("/{skill_id}")
def update_skill(
    skill_id: str,
    _user: dict = Depends(get_current_user),
    payload: RequestPayload = Depends(read_payload),
    store: DocumentStore = Depends(get_store),
):
    skill = get_or_404(store, SKILLS, skill_id, "Skill")
    changes = changes_from(SkillUpdate.model_validate(normalize_skill(payload.fields)))
    return success(serialize(store.update(SKILLS, skill["_id"], changes)))


@router.delete("/{skill_id}")
def delete_skill(
    skill_id: str,
    _user: dict = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
):
    skill = get_or_404(store, SKILLS, skill_id, "Skill")
    store.delete(SKILLS, skill["_id"])
    return success(message="Skill deleted successfully")
