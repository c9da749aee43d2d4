from database import CERTIFICATIONS, EXPERIENCES, PROJECTS, SKILLS, SOCIALS, USERS
from security import verify_password
from seed import seed_database


def test_seed_populates_every_collection(store):
    counts = seed_database(store, "owner@gmail.com", "admin123456")

    for collection, n in counts.items():
        assert store.count(collection) == n
    assert counts[USERS] == 1
    assert counts[PROJECTS] == 3
    assert counts[SOCIALS] == 4

    user = store.find_one(USERS, {})
    assert user["email"] == "owner@gmail.com"
    assert verify_password("admin123456", user["password_hash"])


def test_seeded_data_matches_api_shapes(store):
    seed_database(store, "owner@gmail.com", "admin123456")

    project = store.find_one(PROJECTS, {"slug": "wanna-meal"})
    assert project["links"][0] == {
        "type": "github",
        "url": "https://github.com/MahmoudAbuelazm/wanna-meal",
        "label": None,
    }
    assert project["case_study"]["state_management"].startswith("Provider")
    assert all(img["id"] for img in project["gallery"])
    assert store.find_one(PROJECTS, {"slug": "movie-tv-explorer"}) is not None

    experience = store.find_one(EXPERIENCES, {"company": "Leapro"})
    assert experience["start_date"].year == 2023
    assert store.count(SKILLS, {"category": "Languages"}) == 4
    assert store.count(CERTIFICATIONS) == 2


def test_seed_is_repeatable(store):
    seed_database(store, "owner@gmail.com", "admin123456")
    seed_database(store, "owner@gmail.com", "admin123456")
    assert store.count(USERS) == 1
    assert store.count(PROJECTS) == 3


def test_seed_keep_skips_existing_admin(store):
    seed_database(store, "owner@gmail.com", "admin123456")
    counts = seed_database(store, "owner@gmail.com", "admin123456", clear=False)
    assert counts[USERS] == 0
    assert store.count(USERS) == 1
    assert store.count(PROJECTS) == 6
    assert store.find_one(PROJECTS, {"slug": "wanna-meal-2"}) is not None
