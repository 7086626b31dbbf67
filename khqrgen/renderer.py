"""KHQR image renderer with a labelled frame."""
from __future__ import annotations

import io

import qrcode
from PIL import Image, ImageDraw, ImageFont

KHQR_RED = "#E1232E"


def generate_qr_image(data: str, title: str = "KHQR") -> Image.Image:
    """Generate QR image framed by a red KHQR header band."""

    qr = qrcode.QRCode(version=None, error_correction=qrcode.constants.ERROR_CORRECT_M, box_size=10, border=4)
    qr.add_data(data)
    qr.make(fit=True)

    qr_img = qr.make_image(fill_color="black", back_color="white").convert("RGB")
    width, height = qr_img.size

    label_height = 40
    margin = 20
    canvas_width = width + margin * 2
    canvas_height = height + margin * 2 + label_height

    canvas = Image.new("RGB", (canvas_width, canvas_height), color="#FFFFFF")
    draw = ImageDraw.Draw(canvas)
    draw.rectangle([(0, 0), (canvas_width, label_height)], fill=KHQR_RED)
    canvas.paste(qr_img, (margin, label_height + margin))

    font = ImageFont.load_default()
    text = title.upper()
    left, top, right, bottom = draw.textbbox((0, 0), text, font=font)
    text_x = (canvas_width - (right - left)) // 2
    text_y = (label_height - (bottom - top)) // 2
    draw.text((text_x, text_y), text, fill="#FFFFFF", font=font)

    return canvas


def render_qr_png(payload: str, title: str = "KHQR") -> bytes:
    """Render payload into PNG bytes."""

    image = generate_qr_image(payload, title=title)
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()
