"""
QR code rendering for menu links
"""

from io import BytesIO
from typing import Dict, Optional
import qrcode
import structlog

from qrmenu.core.errors import ValidationError
from qrmenu.services.slugs import menu_url

logger = structlog.get_logger(__name__)

# name -> (foreground, background)
QR_PRESETS: Dict[str, tuple] = {
    "Klasik": ("#000000", "#FFFFFF"),
    "Koyu": ("#FFFFFF", "#000000"),
    "Mavi": ("#1E40AF", "#DBEAFE"),
    "Yeşil": ("#166534", "#DCFCE7"),
    "Mor": ("#7C3AED", "#EDE9FE"),
    "Turuncu": ("#EA580C", "#FED7AA"),
}

DEFAULT_QR_PRESET = "Klasik"


def render_qr_png(data: str, preset: str = DEFAULT_QR_PRESET, box_size: int = 16) -> bytes:
    """
    Render arbitrary data as a PNG QR code

    Args:
        data: Text encoded in the code
        preset: Color preset name
        box_size: Pixels per module

    Returns:
        PNG bytes
    """
    if preset not in QR_PRESETS:
        raise ValidationError(f"Unknown QR preset: {preset}", field="preset")
    fill_color, back_color = QR_PRESETS[preset]

    qr = qrcode.QRCode(
        version=None,
        error_correction=qrcode.constants.ERROR_CORRECT_H,
        box_size=box_size,
        border=2,
    )
    qr.add_data(data)
    qr.make(fit=True)

    img = qr.make_image(fill_color=fill_color, back_color=back_color)

    buffer = BytesIO()
    img.save(buffer, format="PNG")
    return buffer.getvalue()


def render_menu_qr(slug: str, preset: str = DEFAULT_QR_PRESET, base_url: Optional[str] = None) -> bytes:
    """PNG QR code pointing at a tenant's public menu"""
    url = menu_url(slug, base_url)
    png = render_qr_png(url, preset)
    logger.info(f"Generated {preset} QR code for {url}")
    return png
