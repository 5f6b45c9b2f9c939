"""QR image rendering for QRIS payloads."""
from __future__ import annotations

import base64
import io
from dataclasses import dataclass, replace
from typing import Literal

import qrcode
from PIL import Image, ImageDraw, ImageFont

ImageFormat = Literal["PNG", "JPEG"]

_ERROR_CORRECTION = {
    "L": qrcode.constants.ERROR_CORRECT_L,
    "M": qrcode.constants.ERROR_CORRECT_M,
    "Q": qrcode.constants.ERROR_CORRECT_Q,
    "H": qrcode.constants.ERROR_CORRECT_H,
}
_EXTENSION_FORMATS: dict[str, ImageFormat] = {"png": "PNG", "jpg": "JPEG", "jpeg": "JPEG"}
QUIET_ZONE_MODULES = 4


@dataclass(frozen=True)
class RenderOptions:
    """Rendering knobs; ``version`` is the minimum QR version and grows to fit."""

    image_format: ImageFormat = "PNG"
    version: int | None = 5
    error_correction: Literal["L", "M", "Q", "H"] = "L"
    scale: int = 5
    quiet_zone: bool = True
    label: str | None = None

    @classmethod
    def for_extension(cls, ext: str, base: RenderOptions | None = None) -> RenderOptions:
        image_format = _EXTENSION_FORMATS.get(ext.lower().lstrip("."), "PNG")
        return replace(base or cls(), image_format=image_format)


def supported_extensions() -> frozenset[str]:
    return frozenset(_EXTENSION_FORMATS)


def generate_qr_image(data: str, options: RenderOptions) -> Image.Image:
    qr = qrcode.QRCode(
        version=options.version,
        error_correction=_ERROR_CORRECTION[options.error_correction],
        box_size=options.scale,
        border=QUIET_ZONE_MODULES if options.quiet_zone else 0,
    )
    qr.add_data(data)
    qr.make(fit=True)

    qr_img = qr.make_image(fill_color="black", back_color="white").convert("RGB")
    if options.label:
        return _frame_with_label(qr_img, options.label)
    return qr_img


def _frame_with_label(qr_img: Image.Image, label: str) -> Image.Image:
    width, height = qr_img.size

    label_height = 40
    margin = 40
    canvas_width = width + margin * 2
    canvas_height = height + margin * 2 + label_height

    canvas = Image.new("RGB", (canvas_width, canvas_height), color="#F5F7FA")
    canvas.paste(qr_img, (margin, margin))

    draw = ImageDraw.Draw(canvas)
    font = ImageFont.load_default()
    text = label.upper()
    left, top, right, bottom = draw.textbbox((0, 0), text, font=font)
    text_x = (canvas_width - (right - left)) // 2
    text_y = margin + height + (label_height - (bottom - top)) // 2
    draw.rectangle(
        [(margin // 2, margin + height), (canvas_width - margin // 2, margin + height + label_height)],
        fill="#FFFFFF",
    )
    draw.text((text_x, text_y), text, fill="#1F2937", font=font)

    return canvas


def render_qr_bytes(payload: str, options: RenderOptions | None = None) -> bytes:
    """Render payload into encoded image bytes in the requested format."""

    options = options or RenderOptions()
    image = generate_qr_image(payload, options)
    buffer = io.BytesIO()
    image.save(buffer, format=options.image_format)
    return buffer.getvalue()


def render_qr_base64(payload: str, options: RenderOptions | None = None) -> str:
    return base64.b64encode(render_qr_bytes(payload, options)).decode("ascii")
