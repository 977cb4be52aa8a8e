from __future__ import annotations

from io import BytesIO

from PIL import Image

from pdf2square.utils.image.color import ColorSpec


JPEG_QUALITY = 95


def contain_size(width: int, height: int, target: int) -> tuple[int, int]:
    """Scale ``(width, height)`` uniformly so the longer side equals ``target``."""
    if width <= 0 or height <= 0:
        raise ValueError(f"Cannot fit an image of size {width}x{height}")
    scale = target / max(width, height)
    new_width = min(target, max(1, round(width * scale)))
    new_height = min(target, max(1, round(height * scale)))
    return new_width, new_height


def letterbox(
    image: Image.Image,
    size: int,
    background: ColorSpec,
    *,
    flatten: bool = False,
) -> Image.Image:
    """Contain-fit ``image`` onto a ``size`` x ``size`` canvas filled with ``background``.

    The image is scaled up or down preserving its aspect ratio, centred on both
    axes and never cropped. With ``flatten`` the canvas is opaque RGB (the
    background alpha is ignored); otherwise it is RGBA.
    """
    source = image if image.mode == "RGBA" else image.convert("RGBA")
    fitted_size = contain_size(source.width, source.height, size)
    if fitted_size != source.size:
        source = source.resize(fitted_size, resample=Image.Resampling.LANCZOS)

    offset = ((size - source.width) // 2, (size - source.height) // 2)
    if flatten:
        canvas = Image.new("RGB", (size, size), background.as_rgb())
        canvas.paste(source, offset, mask=source)
        return canvas

    canvas = Image.new("RGBA", (size, size), background.as_rgba())
    canvas.alpha_composite(source, dest=offset)
    return canvas


def encode_image(canvas: Image.Image, output_format: str) -> bytes:
    """Encode a composited canvas as PNG (alpha kept) or JPEG (quality 95)."""
    buffer = BytesIO()
    if output_format == "png":
        canvas.save(buffer, format="PNG")
    elif output_format == "jpeg":
        canvas.convert("RGB").save(buffer, format="JPEG", quality=JPEG_QUALITY)
    else:
        raise ValueError(f"Unsupported output format: {output_format}")
    return buffer.getvalue()


def render_square(
    image: Image.Image,
    size: int,
    background: ColorSpec,
    output_format: str,
) -> bytes:
    canvas = letterbox(image, size, background, flatten=output_format == "jpeg")
    return encode_image(canvas, output_format)


__all__ = ["JPEG_QUALITY", "contain_size", "encode_image", "letterbox", "render_square"]
