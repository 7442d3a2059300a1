"""
Schemas for API responses and requests
"""

from qrmenu.schemas.token import LoginRequest, TokenPayload, TokenResponse
from qrmenu.schemas.menu import (
    AdminStateResponse, CategoryDeleteResponse, FeedbackListResponse, HoursResponse,
    MenuResponse, PresetRequest, PriceRequest, ReorderRequest, SlugRequest, SlugResponse,
    TagRequest, TagsResponse, ThemeResponse, ThemeUpdateRequest,
)

__all__ = [
    "AdminStateResponse",
    "CategoryDeleteResponse",
    "FeedbackListResponse",
    "HoursResponse",
    "LoginRequest",
    "MenuResponse",
    "PresetRequest",
    "PriceRequest",
    "ReorderRequest",
    "SlugRequest",
    "SlugResponse",
    "TagRequest",
    "TagsResponse",
    "ThemeResponse",
    "ThemeUpdateRequest",
    "TokenPayload",
    "TokenResponse",
]
