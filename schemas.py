"""
Database Schemas for the Portfolio API

Each Pydantic document model = one MongoDB collection (see database.py).
Create models validate full documents; Update models have every field
optional; only the top-level fields a client sent are applied on update.
"""

from datetime import date, datetime, timezone
from typing import Annotated, List, Literal, Optional

from pydantic import (
    AnyUrl,
    BaseModel,
    ConfigDict,
    EmailStr,
    Field,
    StringConstraints,
    TypeAdapter,
    ValidationError,
    field_validator,
    model_validator,
)

from database import to_object_id

PROJECT_TYPES = ("mobile", "web", "desktop", "other")
SKILL_CATEGORIES = ("Languages", "Frameworks", "Tools", "Databases", "Other")
DEFAULT_COLOR = "#899F87"
HEX_COLOR = r"^#(?:[0-9a-fA-F]{3}){1,2}$"

ProjectType = Literal["mobile", "web", "desktop", "other"]
SkillCategory = Literal["Languages", "Frameworks", "Tools", "Databases", "Other"]
LinkType = Literal["github", "demo", "article", "store", "website", "other"]

Bullet = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=300)]
TechName = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=50)]

_url_adapter = TypeAdapter(AnyUrl)


def check_url(value: Optional[str], schemes=("http", "https")) -> Optional[str]:
    """Validate a URL but keep the caller's spelling of it."""
    if value is None or value == "":
        return value
    try:
        parsed = _url_adapter.validate_python(value)
    except ValidationError:
        raise ValueError("must be a valid URL") from None
    if parsed.scheme not in schemes:
        raise ValueError("must be a valid URL") from None
    return value


def max_project_year() -> int:
    return date.today().year + 1


class Schema(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)


# =====
# Media
# =====
class MediaAsset(Schema):
    url: str = ""
    public_id: str = ""


class GalleryImage(MediaAsset):
    id: str
    caption: str = Field("", max_length=200)


# =====
# Users
# =====
class UserDocument(Schema):
    name: str = Field(..., min_length=2, max_length=50)
    email: EmailStr
    password_hash: str
    role: Literal["admin"] = "admin"
    phone: str = Field("", max_length=20)
    bio: str = Field("", max_length=500)
    location: str = Field("", max_length=100)
    profile_picture: MediaAsset = Field(default_factory=MediaAsset)
    is_active: bool = True
    last_login: Optional[datetime] = None

    @field_validator("email")
    @classmethod
    def _lower_email(cls, v: str) -> str:
        return v.lower()


class UserUpdate(Schema):
    name: Optional[str] = Field(None, min_length=2, max_length=50)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=20)
    bio: Optional[str] = Field(None, max_length=500)
    location: Optional[str] = Field(None, max_length=100)

    @field_validator("email")
    @classmethod
    def _lower_email(cls, v: Optional[str]) -> Optional[str]:
        return v.lower() if v else v


class LoginRequest(Schema):
    email: str
    password: str


class PasswordChange(Schema):
    current_password: str
    new_password: str = Field(..., min_length=6, max_length=128)


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"


# ========
# Projects
# ========
class TechStackItem(Schema):
    name: TechName
    category: Optional[str] = Field(None, max_length=50)


class Feature(Schema):
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=500)


class ProjectLink(Schema):
    type: LinkType = "other"
    url: str = Field(..., min_length=1, max_length=500)
    label: Optional[str] = Field(None, max_length=100)

    @field_validator("url")
    @classmethod
    def _valid_url(cls, v: str) -> str:
        return check_url(v)


class ProjectStats(Schema):
    downloads: int = Field(0, ge=0)
    rating: float = Field(0, ge=0, le=5)
    users: int = Field(0, ge=0)


class CaseStudy(Schema):
    problem: str = Field("", max_length=1000)
    solution: str = Field("", max_length=1000)
    architecture: str = Field("", max_length=1000)
    state_management: str = Field("", max_length=500)
    challenges: List[Bullet] = Field(default_factory=list)
    results: str = Field("", max_length=1000)


class ProjectCreate(Schema):
    title: str = Field(..., min_length=1, max_length=100)
    description: str = Field(..., min_length=1, max_length=1000)
    tech_stack: List[TechStackItem] = Field(..., min_length=1)
    role: str = Field(..., min_length=1, max_length=100)
    year: int
    type: ProjectType = "mobile"
    features: List[Feature] = Field(..., min_length=1)
    links: List[ProjectLink] = Field(default_factory=list)
    stats: ProjectStats = Field(default_factory=ProjectStats)
    case_study: CaseStudy = Field(default_factory=CaseStudy)
    is_featured: bool = False
    is_published: bool = True

    @field_validator("year")
    @classmethod
    def _year_in_range(cls, v: Optional[int]) -> Optional[int]:
        if v is not None and not 2000 <= v <= max_project_year():
            raise ValueError(f"Year must be between 2000 and {max_project_year()}")
        return v


class ProjectUpdate(ProjectCreate):
    title: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, min_length=1, max_length=1000)
    tech_stack: Optional[List[TechStackItem]] = Field(None, min_length=1)
    role: Optional[str] = Field(None, min_length=1, max_length=100)
    year: Optional[int] = None
    type: Optional[ProjectType] = None
    features: Optional[List[Feature]] = Field(None, min_length=1)
    links: Optional[List[ProjectLink]] = None
    stats: Optional[ProjectStats] = None
    case_study: Optional[CaseStudy] = None
    is_featured: Optional[bool] = None
    is_published: Optional[bool] = None


class GalleryReorder(Schema):
    image_ids: List[str]


class CaptionUpdate(Schema):
    caption: str = Field("", max_length=200)


# ===========
# Experiences
# ===========
class ExperienceCreate(Schema):
    company: str = Field(..., min_length=1, max_length=100)
    role: str = Field(..., min_length=1, max_length=100)
    start_date: datetime
    end_date: Optional[datetime] = None
    description: List[Bullet] = Field(..., min_length=1)
    tech: List[TechName] = Field(default_factory=list)
    achievements: List[Bullet] = Field(default_factory=list)
    location: str = Field("", max_length=100)
    is_current: bool = False
    is_published: bool = True

    @model_validator(mode="after")
    def _check_dates(self):
        if self.is_current:
            self.end_date = None
        end, start = self.end_date, self.start_date
        if start and end and _as_utc(end) < _as_utc(start):
            raise ValueError("End date cannot be before start date")
        return self


class ExperienceUpdate(Schema):
    company: Optional[str] = Field(None, min_length=1, max_length=100)
    role: Optional[str] = Field(None, min_length=1, max_length=100)
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    description: Optional[List[Bullet]] = Field(None, min_length=1)
    tech: Optional[List[TechName]] = None
    achievements: Optional[List[Bullet]] = None
    location: Optional[str] = Field(None, max_length=100)
    is_current: Optional[bool] = None
    is_published: Optional[bool] = None

    @model_validator(mode="after")
    def _current_has_no_end(self):
        if self.is_current:
            self.end_date = None
        return self


def _as_utc(value: datetime) -> datetime:
    """Aware UTC datetime; naive values are taken to be UTC already."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


# ======
# Skills
# ======
class SkillCreate(Schema):
    name: str = Field(..., min_length=1, max_length=50)
    category: SkillCategory = "Other"
    level: int = Field(..., ge=1, le=100)
    icon: str = Field("", max_length=100)
    color: str = Field(DEFAULT_COLOR, pattern=HEX_COLOR)
    description: str = Field("", max_length=200)
    is_published: bool = True
    order: int = Field(0, ge=0)


class SkillUpdate(Schema):
    name: Optional[str] = Field(None, min_length=1, max_length=50)
    category: Optional[SkillCategory] = None
    level: Optional[int] = Field(None, ge=1, le=100)
    icon: Optional[str] = Field(None, max_length=100)
    color: Optional[str] = Field(None, pattern=HEX_COLOR)
    description: Optional[str] = Field(None, max_length=200)
    is_published: Optional[bool] = None
    order: Optional[int] = Field(None, ge=0)


class OrderItem(Schema):
    id: str
    order: int = Field(..., ge=0)

    @field_validator("id")
    @classmethod
    def _object_id(cls, v: str) -> str:
        if to_object_id(v) is None:
            raise ValueError("Invalid id")
        return v


class SkillOrderRequest(Schema):
    skills: List[OrderItem]


# ==============
# Certifications
# ==============
class CertificationCreate(Schema):
    title: str = Field(..., min_length=1, max_length=200)
    issuer: str = Field(..., min_length=1, max_length=100)
    date: datetime
    credential_url: str = Field("", max_length=500)
    description: str = Field("", max_length=500)
    is_published: bool = True
    order: int = Field(0, ge=0)

    @field_validator("credential_url")
    @classmethod
    def _valid_url(cls, v: Optional[str]) -> Optional[str]:
        return check_url(v)


class CertificationUpdate(CertificationCreate):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    issuer: Optional[str] = Field(None, min_length=1, max_length=100)
    date: Optional[datetime] = None
    credential_url: Optional[str] = Field(None, max_length=500)
    description: Optional[str] = Field(None, max_length=500)
    is_published: Optional[bool] = None
    order: Optional[int] = Field(None, ge=0)


# =======
# Socials
# =======
class SocialCreate(Schema):
    platform: str = Field(..., min_length=1, max_length=50)
    url: str = Field(..., min_length=1, max_length=500)
    icon: str = Field(..., min_length=1, max_length=100)
    color: str = Field(DEFAULT_COLOR, pattern=HEX_COLOR)
    is_active: bool = True
    order: int = Field(0, ge=0)

    @field_validator("url")
    @classmethod
    def _valid_url(cls, v: Optional[str]) -> Optional[str]:
        return check_url(v, schemes=("http", "https", "mailto"))


class SocialUpdate(SocialCreate):
    platform: Optional[str] = Field(None, min_length=1, max_length=50)
    url: Optional[str] = Field(None, min_length=1, max_length=500)
    icon: Optional[str] = Field(None, min_length=1, max_length=100)
    color: Optional[str] = Field(None, pattern=HEX_COLOR)
    is_active: Optional[bool] = None
    order: Optional[int] = Field(None, ge=0)


class SocialOrderRequest(Schema):
    socials: List[OrderItem]


# ========
# Contacts
# ========
class ContactCreate(Schema):
    name: str = Field(..., min_length=2, max_length=100)
    email: EmailStr
    subject: str = Field(..., min_length=1, max_length=200)
    message: str = Field(..., min_length=10, max_length=1000)
    phone: str = Field("", max_length=20)

    @field_validator("email")
    @classmethod
    def _lower_email(cls, v: str) -> str:
        return v.lower()
