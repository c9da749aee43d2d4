"""
Populate the database with an admin user and sample portfolio content.

    python seed.py [--keep] [--email EMAIL] [--password PASSWORD]
"""

import argparse
import logging
import sys
from datetime import datetime
from typing import Dict, Optional

from bson import ObjectId
from pymongo.errors import PyMongoError
from slugify import slugify

from database import (
    CERTIFICATIONS,
    CONTENT_COLLECTIONS,
    EXPERIENCES,
    PROJECTS,
    SKILLS,
    SOCIALS,
    USERS,
    DatabaseUnavailable,
    DocumentStore,
    connect,
    ensure_indexes,
)
from normalize import normalize_experience, normalize_project
from routers.projects import unique_slug
from schemas import (
    CertificationCreate,
    ExperienceCreate,
    MediaAsset,
    ProjectCreate,
    SkillCreate,
    SocialCreate,
    UserDocument,
)
from security import hash_password
from settings import configure_logging, get_settings

logger = logging.getLogger("seed")

_UNSPLASH = "https://images.unsplash.com/photo-{}?w=800&h=600&fit=crop"

# ============
# Sample data
# ============
PROFILE = {
    "name": "Mahmoud Ahmed",
    "phone": "01021288238",
    "bio": (
        "Passionate Flutter Developer with expertise in mobile app development, "
        "state management, and modern UI/UX design."
    ),
    "location": "Mansoura, Egypt",
}

PROJECTS_DATA = [
    {
        "title": "Wanna Meal",
        "description": (
            "A food delivery application built with Flutter: authentication, restaurant "
            "listings, menu management, order tracking and payment integration."
        ),
        "cover": "1565299624946-b28f40a0ca4b",
        "gallery": [
            ("1565299624946-b28f40a0ca4b", "Home Screen - Restaurant Listings"),
            ("1513104890138-7c749659a591", "Menu Selection Interface"),
            ("1555939594-58d7cb561ad1", "Order Tracking System"),
        ],
        "techStack": ["Flutter", "Dart", "Firebase", "Provider", "Google Maps"],
        "role": "Full Stack Developer",
        "year": 2024,
        "type": "mobile",
        "features": [
            "User authentication and profile management",
            "Restaurant discovery and menu browsing",
            "Real-time order tracking",
            "Push notifications for order updates",
        ],
        "links": {
            "github": "https://github.com/MahmoudAbuelazm/wanna-meal",
            "demo": "https://wanna-meal-demo.web.app",
        },
        "stats": {"downloads": 1500, "rating": 4.8, "users": 1200},
        "caseStudy": {
            "problem": "Users needed fast food delivery with real-time tracking.",
            "solution": "A Flutter app on Firebase with Provider and Google Maps.",
            "architecture": "MVVM with Firebase for auth, data and cloud functions.",
            "stateManagement": "Provider, with separate providers for user, cart and orders.",
            "challenges": [
                "Implementing real-time order tracking",
                "Handling offline scenarios gracefully",
            ],
            "results": "1500+ downloads and a 4.8 star rating.",
        },
        "isFeatured": True,
    },
    {
        "title": "Movie & TV Explorer",
        "description": (
            "A movie and TV show discovery app to browse, search and read details "
            "about movies and series."
        ),
        "cover": "1489599849927-2ee91cede3ba",
        "gallery": [
            ("1489599849927-2ee91cede3ba", "Movie Discovery Home"),
            ("1517604931442-7e0c8ed2963c", "Detailed Movie Information"),
        ],
        "techStack": ["Flutter", "Dart", "TMDB API", "Bloc", "Hive"],
        "role": "Frontend Developer",
        "year": 2024,
        "type": "mobile",
        "features": [
            "Browse movies and TV shows by categories",
            "Search with filters",
            "Watchlist and favorites management",
        ],
        "links": {"github": "https://github.com/MahmoudAbuelazm/movie-explorer"},
        "stats": {"downloads": 800, "rating": 4.6, "users": 650},
        "isFeatured": True,
    },
    {
        "title": "Bookly",
        "description": (
            "A book reading and management app to discover, organize and track "
            "reading progress."
        ),
        "cover": "1481627834876-b7833e8f5570",
        "gallery": [],
        "techStack": ["Flutter", "Dart", "Firebase", "Cubit", "Google Books API"],
        "role": "Full Stack Developer",
        "year": 2023,
        "type": "mobile",
        "features": [
            "Book discovery and search",
            "Reading progress tracking",
            "Personal library management",
        ],
        "links": {"github": "https://github.com/MahmoudAbuelazm/bookly"},
        "stats": {"downloads": 1200, "rating": 4.7, "users": 950},
    },
]

EXPERIENCES_DATA = [
    {
        "company": "The Gate 1",
        "role": "Flutter Developer",
        "startDate": "2024-07-01",
        "endDate": "2024-09-30",
        "description": [
            "Developed and maintained the Estgmam app using Flutter",
            "Implemented Cubit/Bloc state management",
            "Integrated Google Maps API for location-based features",
        ],
        "tech": ["Flutter", "Dart", "Cubit", "Bloc", "Google Maps", "Firebase"],
        "location": "Remote",
    },
    {
        "company": "Leapro",
        "role": "Flutter Developer",
        "startDate": "2023-11-01",
        "endDate": "2024-06-30",
        "description": [
            "Built and maintained Flutter applications using Provider",
            "Implemented MVVM architecture",
            "Integrated third-party APIs and services",
        ],
        "tech": ["Flutter", "Dart", "Provider", "MVVM", "REST APIs", "Git"],
        "location": "Remote",
    },
    {
        "company": "ITI Training",
        "role": "Flutter Trainee",
        "startDate": "2023-08-01",
        "endDate": "2023-09-30",
        "description": [
            "Completed an intensive Flutter and Dart training program",
            "Built a Quiz app as the final project",
        ],
        "tech": ["Flutter", "Dart", "Firebase", "Git"],
        "location": "Mansoura, Egypt",
    },
]

SKILLS_DATA = [
    ("C++", "Languages", 85, "devicon-cplusplus-plain", "#00599C", 1),
    ("Dart", "Languages", 90, "devicon-dart-plain", "#00D4AA", 2),
    ("HTML", "Languages", 80, "devicon-html5-plain", "#E34F26", 3),
    ("CSS", "Languages", 75, "devicon-css3-plain", "#1572B6", 4),
    ("Flutter", "Frameworks", 95, "devicon-flutter-plain", "#02569B", 1),
    ("Firebase", "Tools", 85, "devicon-firebase-plain", "#FFCA28", 1),
    ("Git", "Tools", 80, "devicon-git-plain", "#F05032", 2),
    ("GitHub", "Tools", 85, "devicon-github-original", "#181717", 3),
    ("SQLite", "Databases", 70, "devicon-sqlite-plain", "#003B57", 1),
    ("Firestore", "Databases", 80, "devicon-firebase-plain", "#FFCA28", 2),
]

CERTIFICATIONS_DATA = [
    {
        "title": "Flutter Development Bootcamp",
        "issuer": "ITI Training",
        "date": "2023-09-30",
        "credential_url": "https://iti.gov.eg/certificates/flutter-bootcamp",
        "description": "Flutter and Dart development training with hands-on projects",
        "order": 1,
    },
    {
        "title": "Firebase for Flutter Developers",
        "issuer": "Google Developers",
        "date": "2023-08-15",
        "credential_url": "https://developers.google.com/certification/firebase-flutter",
        "description": "Firebase integration and backend services for Flutter applications",
        "order": 2,
    },
]

SOCIALS_DATA = [
    ("GitHub", "https://github.com/MahmoudAbuelazm", "devicon-github-original", "#181717"),
    ("LinkedIn", "https://linkedin.com/in/mahmoud-abu-elazem", "devicon-linkedin-plain", "#0077B5"),
    ("Twitter", "https://twitter.com/mahmoud_abuelazm", "devicon-twitter-original", "#1DA1F2"),
    ("Email", "mailto:mahmoudabuelazem2467@gmail.com", "devicon-google-plain", "#EA4335"),
]


def _image(photo: str, public_id: str) -> Dict[str, str]:
    return MediaAsset(url=_UNSPLASH.format(photo), public_id=public_id).model_dump()


def _project_document(raw: dict) -> dict:
    raw = dict(raw)
    cover = raw.pop("cover")
    gallery = raw.pop("gallery")
    project = ProjectCreate.model_validate(normalize_project(raw))

    slug = slugify(project.title)
    document = project.model_dump()
    document["slug"] = slug
    document["cover"] = _image(cover, f"portfolio/{slug}-cover")
    document["gallery"] = [
        {"id": str(ObjectId()), **_image(photo, f"portfolio/{slug}-{n}"), "caption": caption}
        for n, (photo, caption) in enumerate(gallery, start=1)
    ]
    return document


def seed_database(
    store: DocumentStore, admin_email: str, admin_password: str, clear: bool = True
) -> Dict[str, int]:
    """Insert the sample content and return how many documents went in per collection."""
    if clear:
        store.clear(CONTENT_COLLECTIONS)
        logger.info("Existing data cleared")

    counts: Dict[str, int] = {}

    user = UserDocument(
        email=admin_email,
        password_hash=hash_password(admin_password),
        **PROFILE,
    )
    if store.find_one(USERS, {"email": user.email}):
        logger.info("User %s already exists, skipping", user.email)
        counts[USERS] = 0
    else:
        store.create(USERS, user.model_dump())
        counts[USERS] = 1

    for raw in PROJECTS_DATA:
        document = _project_document(raw)
        document["slug"] = unique_slug(store, document["title"])
        store.create(PROJECTS, document)
    counts[PROJECTS] = len(PROJECTS_DATA)

    for raw in EXPERIENCES_DATA:
        experience = ExperienceCreate.model_validate(normalize_experience(raw))
        store.create(EXPERIENCES, experience.model_dump())
    counts[EXPERIENCES] = len(EXPERIENCES_DATA)

    for name, category, level, icon, color, order in SKILLS_DATA:
        skill = SkillCreate(
            name=name, category=category, level=level, icon=icon, color=color, order=order
        )
        store.create(SKILLS, skill.model_dump())
    counts[SKILLS] = len(SKILLS_DATA)

    for raw in CERTIFICATIONS_DATA:
        certification = CertificationCreate.model_validate(raw)
        store.create(CERTIFICATIONS, certification.model_dump())
    counts[CERTIFICATIONS] = len(CERTIFICATIONS_DATA)

    for order, (platform, url, icon, color) in enumerate(SOCIALS_DATA, start=1):
        social = SocialCreate(platform=platform, url=url, icon=icon, color=color, order=order)
        store.create(SOCIALS, social.model_dump())
    counts[SOCIALS] = len(SOCIALS_DATA)

    for collection, n in counts.items():
        logger.info("%s seeded: %d", collection, n)
    return counts


def main(argv: Optional[list] = None) -> int:
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Seed the portfolio database.")
    parser.add_argument("--keep", action="store_true", help="do not clear existing data")
    parser.add_argument("--email", default=settings.admin_email)
    parser.add_argument("--password", default=settings.admin_password)
    args = parser.parse_args(argv)

    configure_logging(settings)
    try:
        client = connect(settings)
    except DatabaseUnavailable as exc:
        logger.error("%s", exc)
        return 1

    started = datetime.now()
    try:
        store = DocumentStore(client[settings.database_name])
        ensure_indexes(store)
        seed_database(store, args.email, args.password, clear=not args.keep)
    except PyMongoError:
        logger.exception("Error seeding database")
        return 1
    finally:
        client.close()
    logger.info("Database seeded in %.1fs", (datetime.now() - started).total_seconds())
    return 0


if __name__ == "__main__":
    sys.exit(main())
