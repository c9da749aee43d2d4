"""
Resource routers, mounted under the API prefix by main.create_app.
"""

from fastapi import APIRouter

from routers import (
    auth,
    certifications,
    contact,
    experiences,
    projects,
    skills,
    socials,
    users,
)

api_router = APIRouter()
for _module in (auth, users, projects, experiences, skills, certifications, socials, contact):
    api_router.include_router(_module.router)
