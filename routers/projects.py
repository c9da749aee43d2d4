"""
Project routes: public listing and admin CRUD, including the image gallery.
"""

from __future__ import annotations

import logging
import re
from typing import Optional

from bson import ObjectId
from fastapi import APIRouter, Depends, HTTPException, Query
from pymongo.errors import PyMongoError
from slugify import slugify

from database import PROJECTS, DocumentStore, serialize
from dependencies import RequestPayload, get_media_client, get_store, read_payload
from media import MediaClient, MediaError, discard_asset, upload_image, validate_image
from normalize import normalize_fields, normalize_project, to_list
from routers.common import changes_from, get_or_404, pagination, success
from schemas import CaptionUpdate, GalleryReorder, ProjectCreate, ProjectUpdate
from security import get_current_user
from settings import Settings, get_settings

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/projects", tags=["projects"])

MAX_GALLERY_UPLOAD = 10
FEATURED_LIMIT = 6


def unique_slug(store: DocumentStore, title: str, exclude_id: Optional[ObjectId] = None) -> str:
    base = slugify(title) or "project"
    candidate, n = base, 1
    while store.find_one(PROJECTS, {"slug": candidate, "_id": {"$ne": exclude_id}}):
        n += 1
        candidate = f"{base}-{n}"
    return candidate


# Public
@router.get("")
def list_projects(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    type: Optional[str] = None,
    year: Optional[int] = None,
    tech: Optional[str] = None,
    featured: Optional[bool] = None,
    search: Optional[str] = None,
    store: DocumentStore = Depends(get_store),
):
    query: dict = {"is_published": True}
    if type:
        query["type"] = type
    if year:
        query["year"] = year
    if tech:
        query["tech_stack.name"] = {"$regex": f"^{re.escape(tech)}$", "$options": "i"}
    if featured:
        query["is_featured"] = True
    if search:
        pattern = {"$regex": re.escape(search), "$options": "i"}
        query["$or"] = [{"title": pattern}, {"description": pattern}]

    total = store.count(PROJECTS, query)
    projects = store.find(
        PROJECTS, query, sort=[("created_at", -1)], skip=(page - 1) * limit, limit=limit
    )
    return success(
        [serialize(p) for p in projects], pagination=pagination(page, limit, total)
    )


@router.get("/featured")
def featured_projects(store: DocumentStore = Depends(get_store)):
    projects = store.find(
        PROJECTS,
        {"is_featured": True, "is_published": True},
        sort=[("created_at", -1)],
        limit=FEATURED_LIMIT,
    )
    return success([serialize(p) for p in projects])


@router.get("/{slug}")
def get_project(slug: str, store: DocumentStore = Depends(get_store)):
    project = store.find_one(PROJECTS, {"slug": slug.lower(), "is_published": True})
    if not project:
        raise HTTPException(status_code=404, detail="Project not found")
    return success(serialize(project))


# Admin
@router.post("", status_code=201)
def create_project(
    _user: dict = Depends(get_current_user),
    payload: RequestPayload = Depends(read_payload),
    store: DocumentStore = Depends(get_store),
    media: MediaClient = Depends(get_media_client),
    settings: Settings = Depends(get_settings),
):
    project = ProjectCreate.model_validate(normalize_project(payload.fields))
    cover = payload.file("cover")
    if cover is None:
        raise HTTPException(status_code=400, detail="Project cover image is required")

    document = project.model_dump()
    document["slug"] = unique_slug(store, project.title)
    document["cover"] = upload_image(media, cover, settings.media_folder, settings.max_upload_bytes)
    document["gallery"] = []
    try:
        created = store.create(PROJECTS, document)
    except PyMongoError:
        discard_asset(media, document["cover"])
        raise
    logger.info("Created project %s", created["slug"])
    return success(serialize(created))


@router.put("/{project_id}")
def update_project(
    project_id: str,
    _user: dict = Depends(get_current_user),
    payload: RequestPayload = Depends(read_payload),
    store: DocumentStore = Depends(get_store),
    media: MediaClient = Depends(get_media_client),
    settings: Settings = Depends(get_settings),
):
    project = get_or_404(store, PROJECTS, project_id, "Project")
    changes = changes_from(ProjectUpdate.model_validate(normalize_project(payload.fields)))
    if changes.get("title") and changes["title"] != project.get("title"):
        changes["slug"] = unique_slug(store, changes["title"], exclude_id=project["_id"])

    cover = payload.file("cover")
    if cover is not None:
        changes["cover"] = upload_image(
            media, cover, settings.media_folder, settings.max_upload_bytes
        )

    try:
        updated = store.update(PROJECTS, project["_id"], changes)
    except PyMongoError:
        discard_asset(media, changes.get("cover"))
        raise
    if cover is not None:
        discard_asset(media, project.get("cover"))
    return success(serialize(updated))


@router.delete("/{project_id}")
def delete_project(
    project_id: str,
    _user: dict = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
    media: MediaClient = Depends(get_media_client),
):
    project = get_or_404(store, PROJECTS, project_id, "Project")
    discard_asset(media, project.get("cover"))
    for image in project.get("gallery", []):
        discard_asset(media, image)
    store.delete(PROJECTS, project["_id"])
    return success(message="Project deleted successfully")


# Gallery
@router.post("/{project_id}/gallery")
def upload_gallery_images(
    project_id: str,
    _user: dict = Depends(get_current_user),
    payload: RequestPayload = Depends(read_payload),
    store: DocumentStore = Depends(get_store),
    media: MediaClient = Depends(get_media_client),
    settings: Settings = Depends(get_settings),
):
    project = get_or_404(store, PROJECTS, project_id, "Project")
    images = payload.files.get("images", [])
    if not images:
        raise HTTPException(status_code=400, detail="No images uploaded")
    if len(images) > MAX_GALLERY_UPLOAD:
        raise HTTPException(
            status_code=400, detail=f"At most {MAX_GALLERY_UPLOAD} images per upload"
        )

    for image in images:
        validate_image(image, settings.max_upload_bytes)

    new_images = []
    try:
        for image in images:
            asset = upload_image(media, image, settings.media_folder, settings.max_upload_bytes)
            new_images.append({"id": str(ObjectId()), **asset, "caption": ""})
        gallery = project.get("gallery", []) + new_images
        updated = store.update(PROJECTS, project["_id"], {"gallery": gallery})
    except (MediaError, PyMongoError):
        for image in new_images:
            discard_asset(media, image)
        raise
    return success(
        {"gallery": serialize(updated)["gallery"]},
        message=f"{len(new_images)} images uploaded successfully",
    )


@router.put("/{project_id}/gallery/reorder")
def reorder_gallery(
    project_id: str,
    _user: dict = Depends(get_current_user),
    payload: RequestPayload = Depends(read_payload),
    store: DocumentStore = Depends(get_store),
):
    fields = normalize_fields(payload.fields)
    if "image_ids" in fields:
        fields["image_ids"] = to_list(fields["image_ids"])
    order = GalleryReorder.model_validate(fields).image_ids

    project = get_or_404(store, PROJECTS, project_id, "Project")
    gallery = project.get("gallery", [])
    by_id = {image["id"]: image for image in gallery}
    listed = [by_id[i] for i in dict.fromkeys(order) if i in by_id]
    listed_ids = {image["id"] for image in listed}
    reordered = listed + [image for image in gallery if image["id"] not in listed_ids]

    updated = store.update(PROJECTS, project["_id"], {"gallery": reordered})
    return success(
        {"gallery": serialize(updated)["gallery"]}, message="Gallery reordered successfully"
    )


@router.put("/{project_id}/gallery/{image_id}")
def update_image_caption(
    project_id: str,
    image_id: str,
    _user: dict = Depends(get_current_user),
    payload: RequestPayload = Depends(read_payload),
    store: DocumentStore = Depends(get_store),
):
    caption = CaptionUpdate.model_validate(normalize_fields(payload.fields)).caption
    project = get_or_404(store, PROJECTS, project_id, "Project")
    gallery = project.get("gallery", [])
    image = next((img for img in gallery if img["id"] == image_id), None)
    if image is None:
        raise HTTPException(status_code=404, detail="Gallery image not found")

    image["caption"] = caption
    store.update(PROJECTS, project["_id"], {"gallery": gallery})
    return success({"image": image}, message="Image caption updated successfully")


@router.delete("/{project_id}/gallery/{image_id}")
def delete_gallery_image(
    project_id: str,
    image_id: str,
    _user: dict = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
    media: MediaClient = Depends(get_media_client),
):
    project = get_or_404(store, PROJECTS, project_id, "Project")
    gallery = project.get("gallery", [])
    image = next((img for img in gallery if img["id"] == image_id), None)
    if image is None:
        raise HTTPException(status_code=404, detail="Gallery image not found")

    discard_asset(media, image)
    store.update(
        PROJECTS, project["_id"], {"gallery": [img for img in gallery if img["id"] != image_id]}
    )
    return success(message="Gallery image deleted successfully")
