"""
Business model - one record per tenant
"""

from pydantic import BaseModel, Field, field_validator
from typing import Any, Dict, List, Optional
import re

SLUG_PATTERN = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")
TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")

WEEK_DAYS = ["Pazartesi", "Salı", "Çarşamba", "Perşembe", "Cuma", "Cumartesi", "Pazar"]

SOCIAL_PLATFORMS = ("instagram", "facebook", "twitter", "youtube", "tiktok", "website")


class WorkingHours(BaseModel):
    """Opening hours for one day of the week"""
    day: str
    open: str = "09:00"
    close: str = "22:00"
    is_closed: bool = False

    @field_validator("open", "close")
    @classmethod
    def check_time(cls, value: str) -> str:
        # "24:00" is accepted as an alias for midnight
        if value == "24:00":
            return "00:00"
        if not TIME_PATTERN.match(value):
            raise ValueError("time must be HH:MM")
        return value


class SliderItem(BaseModel):
    """Storefront slider entry"""
    id: str
    title: str
    subtitle: Optional[str] = None
    image: str
    link: Optional[str] = None


class WelcomeSettings(BaseModel):
    """Splash screen shown before the menu"""
    logo_text: str = ""
    description: str = ""
    background_image: Optional[str] = None
    background_video: Optional[str] = None
    show_welcome: bool = False


def default_working_hours() -> List[WorkingHours]:
    """Monday to Saturday 09:00-22:00, Sunday closed"""
    return [
        WorkingHours(day=day, open="09:00", close="22:00", is_closed=(day == "Pazar"))
        for day in WEEK_DAYS
    ]


class Business(BaseModel):
    """Tenant business profile"""

    id: str
    slug: str
    name: str = ""
    description: str = ""
    phone: str = ""
    email: str = ""
    address: str = ""
    website: str = ""
    slogan: Optional[str] = None

    # Branding
    logo: str = ""
    cover_image: str = ""
    cuisine_types: List[str] = Field(default_factory=list)
    rating: float = 5.0
    review_count: int = 0

    # Nested structures, replaced wholesale on update
    social_media: Dict[str, str] = Field(default_factory=dict)
    working_hours: List[WorkingHours] = Field(default_factory=default_working_hours)
    gallery: List[str] = Field(default_factory=list)
    slider_items: List[SliderItem] = Field(default_factory=list)
    welcome_settings: Optional[WelcomeSettings] = None
    theme_settings: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("slug")
    @classmethod
    def check_slug(cls, value: str) -> str:
        if not SLUG_PATTERN.match(value):
            raise ValueError("slug must be lowercase letters, digits and single hyphens")
        return value

    @field_validator("working_hours")
    @classmethod
    def check_week(cls, value: List[WorkingHours]) -> List[WorkingHours]:
        if value and len(value) != 7:
            raise ValueError("working_hours must have one entry per day of the week")
        return value

    @field_validator("social_media")
    @classmethod
    def drop_empty_links(cls, value: Dict[str, str]) -> Dict[str, str]:
        return {platform: url for platform, url in value.items() if url}


def empty_draft(slug: str) -> Business:
    """Editable placeholder for a tenant that could not be loaded"""
    return Business(id="", slug=slug)
