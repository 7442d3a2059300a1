"""
Theme projection

Derives the storefront styling tokens from ``business.theme_settings``.
Stored settings are an open camelCase mapping; recognized tokens are
validated against ThemeSettings, everything else is ignored.
"""

from typing import Any, Dict, Mapping, Optional
import pydantic
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
import structlog

from qrmenu.core.errors import ValidationError
from qrmenu.core.events import BusinessUpdated, TenantLoaded

logger = structlog.get_logger(__name__)


class ThemeSettings(BaseModel):
    """Recognized styling tokens with storefront defaults"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    # Colors
    primary_color: str = "#000000"
    accent_color: str = "#ffffff"
    card_color: str = "#171717"
    text_color: str = "#ffffff"
    button_color: str = "#ffffff"
    button_text_color: str = "#000000"

    font_family: str = "Inter"

    # Buttons
    button_radius: str = "12px"
    button_shadow: str = "0 4px 6px -1px rgba(255,255,255,0.1)"

    # Cards
    card_radius: str = "16px"
    card_shadow: str = "0 10px 15px -3px rgba(0,0,0,0.3)"
    card_border: str = "1px solid rgba(255,255,255,0.05)"
    card_border_color: str = "rgba(255,255,255,0.05)"
    card_border_width: int = 1
    card_gap: int = 16
    card_image_height: int = 160
    card_shadow_enabled: bool = True
    card_shadow_color: str = "rgba(0,0,0,0.3)"
    card_shadow_x: int = 0
    card_shadow_y: int = 4
    card_shadow_blur: int = 15
    card_shadow_spread: int = 0
    image_shadow_enabled: bool = False
    image_shadow_color: str = "rgba(0,0,0,0.3)"
    image_shadow_x: int = 0
    image_shadow_y: int = 4
    image_shadow_blur: int = 10
    image_shadow_spread: int = 0

    # Typography
    title_size: str = "16px"
    description_size: str = "14px"
    price_size: str = "18px"

    dark_mode: bool = True

    # Slider
    slider_height: int = 200
    slider_radius: int = 0
    slider_padding_top: int = 0
    slider_padding_bottom: int = 0
    slider_padding_left: int = 0
    slider_padding_right: int = 0
    slider_title_color: Optional[str] = None
    slider_subtitle_color: Optional[str] = None
    slider_enabled: bool = True

    # Visibility
    details_enabled: bool = True
    feedback_enabled: bool = True

    # Header
    header_bg_color: str = "rgba(0,0,0,0.95)"
    header_title_color: str = "#ffffff"
    header_star_color: str = "#ffffff"
    header_star_bg_color: str = "rgba(255,255,255,0.1)"
    header_rating_enabled: bool = True

    # Category bar
    category_bg_color: str = "#000000"
    category_active_color: str = "#ffffff"
    category_inactive_color: str = "#171717"
    category_active_text_color: str = "#000000"
    category_inactive_text_color: str = "#ffffff"
    category_icon_color: str = "#ffffff"
    category_button_radius: int = 12
    category_gap: int = 12
    category_padding_x: int = 16
    category_padding_y: int = 10

    # Bottom navigation
    bottom_nav_bg_color: str = "rgba(0,0,0,0.95)"
    bottom_nav_active_color: str = "#ffffff"
    bottom_nav_inactive_color: str = "rgba(255,255,255,0.5)"
    bottom_nav_border_color: str = "rgba(255,255,255,0.1)"
    bottom_nav_icon_size: int = 24
    bottom_nav_gap: int = 0
    bottom_nav_padding_y: int = 12

    # Content area
    category_title_color: str = "#ffffff"
    product_count_color: str = "rgba(255,255,255,0.4)"
    menu_bg_color: str = "#171717"
    menu_title_color: str = "#ffffff"
    menu_description_color: str = "rgba(255,255,255,0.5)"
    menu_image_radius: int = 8
    menu_card_radius: Optional[int] = None

    # Featured section
    featured_title_color: Optional[str] = None
    featured_name_color: Optional[str] = None
    featured_price_color: Optional[str] = None
    featured_card_bg_color: Optional[str] = None
    featured_card_radius: Optional[int] = None
    featured_menu_radius: Optional[int] = None
    featured_image_radius: Optional[int] = None

    # Search
    search_bg_color: str = "#000000"
    search_input_bg_color: str = "#171717"
    search_text_color: str = "#ffffff"
    search_result_bg_color: str = "#171717"
    search_result_text_color: str = "#ffffff"

    # Product detail
    product_modal_bg_color: str = "rgba(0,0,0,0.8)"
    product_card_bg_color: str = "#171717"
    product_text_color: str = "#ffffff"
    product_close_button_bg_color: str = "rgba(0,0,0,0.5)"
    product_close_icon_color: str = "#ffffff"
    product_fav_button_bg_color: Optional[str] = None
    product_title_color: Optional[str] = None
    product_description_color: Optional[str] = None
    product_price_color: Optional[str] = None
    product_info_icon_color: Optional[str] = None
    product_divider_color: Optional[str] = None
    product_tag_bg_color: Optional[str] = None
    product_tag_text_color: Optional[str] = None
    product_tag_radius: Optional[int] = None

    # Feedback modal
    feedback_modal_bg_color: str = "#171717"
    feedback_card_bg_color: str = "#171717"
    feedback_text_color: str = "#ffffff"
    feedback_blur: bool = True

    # Business info modal
    business_modal_bg_color: str = "rgba(0,0,0,0.8)"
    business_card_bg_color: str = "#171717"
    business_text_color: str = "#ffffff"
    business_blur: bool = True

    # Other blurs
    search_blur: bool = True
    product_blur: bool = True
    bottom_nav_blur: bool = True
    category_blur: bool = False


# Lookup of every accepted key spelling to its field name
_TOKEN_NAMES: Dict[str, str] = {
    **{name: name for name in ThemeSettings.model_fields},
    **{field.alias: name for name, field in ThemeSettings.model_fields.items() if field.alias},
}


def _preset(primary: str, accent: str, card: str, business_modal: bool = True) -> Dict[str, str]:
    colors = {
        "primaryColor": primary, "accentColor": accent, "cardColor": card,
        "searchBgColor": primary, "searchInputBgColor": card, "searchTextColor": "#ffffff",
        "searchResultBgColor": card, "searchResultTextColor": "#ffffff",
        "productModalBgColor": primary, "productCardBgColor": card, "productTextColor": "#ffffff",
        "productCloseButtonBgColor": "rgba(0,0,0,0.5)", "productCloseIconColor": "#ffffff",
        "feedbackModalBgColor": card, "feedbackCardBgColor": card, "feedbackTextColor": "#ffffff",
    }
    if business_modal:
        colors.update({"businessModalBgColor": primary, "businessCardBgColor": card, "businessTextColor": "#ffffff"})
    return colors


COLOR_PRESETS: Dict[str, Dict[str, str]] = {
    "Koyu Siyah": _preset("#000000", "#ffffff", "#171717"),
    "Lacivert": _preset("#1e3a5f", "#60a5fa", "#0f2744"),
    "Bordo": _preset("#7f1d1d", "#fbbf24", "#5c1515", business_modal=False),
    "Zümrüt": _preset("#064e3b", "#10b981", "#053929", business_modal=False),
    "Mor": _preset("#4c1d95", "#a78bfa", "#3b1574", business_modal=False),
    "Altın": _preset("#1c1917", "#d4af37", "#292524", business_modal=False),
}


def preset(name: str) -> Dict[str, str]:
    """Color tokens of a named preset, camelCase keys as stored"""
    if name not in COLOR_PRESETS:
        raise ValidationError(f"Unknown theme preset: {name}", field="preset")
    return dict(COLOR_PRESETS[name])


class ThemeProjection:
    """Current styling tokens of one tenant"""

    def __init__(self):
        self.tokens = ThemeSettings()
        self.apply_count = 0
        self._last_applied: Optional[Dict[str, Any]] = None
        self._store = None

    def apply(self, theme_settings: Mapping[str, Any]) -> ThemeSettings:
        """Merge stored settings over the defaults

        Unknown tokens and recognized tokens with invalid values are
        skipped; the affected tokens keep their defaults.
        """
        accepted: Dict[str, Any] = {}
        for key, value in theme_settings.items():
            name = _TOKEN_NAMES.get(key)
            if name is None:
                logger.debug(f"Ignoring unknown theme token {key}")
                continue
            try:
                ThemeSettings.model_validate({name: value})
            except pydantic.ValidationError:
                logger.warning(f"Ignoring invalid value for theme token {key}: {value!r}")
                continue
            accepted[name] = value

        self.tokens = ThemeSettings.model_validate(accepted)
        self._last_applied = dict(theme_settings)
        self.apply_count += 1
        return self.tokens

    def attach(self, store) -> "ThemeProjection":
        """Follow a DataStore's business record"""
        self._store = store
        store.events.subscribe(TenantLoaded.__name__, self._on_store_change)
        store.events.subscribe(BusinessUpdated.__name__, self._on_store_change)
        self._on_store_change(None)
        return self

    def detach(self):
        if self._store is None:
            return
        self._store.events.unsubscribe(TenantLoaded.__name__, self._on_store_change)
        self._store.events.unsubscribe(BusinessUpdated.__name__, self._on_store_change)
        self._store = None

    def _on_store_change(self, event):
        store = self._store
        if store is None or store.is_loading or store.business is None:
            return
        settings = store.business.theme_settings
        if not settings or settings == self._last_applied:
            return
        self.apply(settings)
        logger.info(f"Applied theme for {store.slug}")

    def to_dict(self) -> Dict[str, Any]:
        """Tokens keyed the way the storefront stores them"""
        return self.tokens.model_dump(by_alias=True)

    def css_variables(self) -> Dict[str, str]:
        t = self.tokens
        return {
            "--color-primary": t.primary_color,
            "--color-accent": t.accent_color,
            "--color-card": t.card_color,
            "--color-text": t.text_color,
            "--color-button": t.button_color,
            "--color-button-text": t.button_text_color,
            "--font-family": t.font_family,
            "--button-radius": t.button_radius,
            "--button-shadow": t.button_shadow,
            "--card-radius": t.card_radius,
            "--card-shadow": t.card_shadow,
            "--card-border": t.card_border,
            "--title-size": t.title_size,
            "--description-size": t.description_size,
            "--price-size": t.price_size,
        }
