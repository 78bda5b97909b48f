"""Iconwright - Icon composition engine.

render() is a pure function of (bitmap, params): every call starts from a
fresh transparent canvas and returns a new CANVAS_SIZE x CANVAS_SIZE RGBA
image. Layers are built in this order:

    shadow -> shape fill -> clipped content (background, artwork or glyph)
"""
from __future__ import annotations

from warnings import warn

from PIL import Image, ImageChops, ImageColor, ImageDraw, ImageFilter

from iconwright_core.params import CompositionParameters
from iconwright_core.protocol import (
    CANVAS_SIZE,
    CANVAS_MODE,
    MASK_SUPERSAMPLE,
    SHADOW_FILL_FALLBACK,
    PLACEHOLDER_COLOR,
)

TRANSPARENT = (0, 0, 0, 0)


def drawable_square(margin: float) -> tuple[float, float]:
    """Return (origin, side) of the square left after insetting by margin."""
    return margin, max(CANVAS_SIZE - 2 * margin, 0)


def clamp_radius(radius: float, draw_size: float) -> float:
    # Past half the side the rounded rect degenerates to a circle.
    return min(max(radius, 0), draw_size / 2)


def artwork_box(
    origin: float,
    draw_size: float,
    scale: float,
    width: int,
    height: int,
) -> tuple[float, float, float, float]:
    """Aspect-preserving (x, y, w, h) for the artwork, centered in the square."""
    draw_w = draw_size * scale
    draw_h = draw_size * scale
    aspect = width / height
    if aspect > 1:
        draw_h = draw_w / aspect
    else:
        draw_w = draw_h * aspect

    x = origin + (draw_size - draw_w) / 2
    y = origin + (draw_size - draw_h) / 2
    return x, y, draw_w, draw_h


def rounded_mask(origin: float, draw_size: float, radius: float, offset_y: float = 0) -> Image.Image:
    """Anti-aliased "L" mask of the rounded square, full canvas sized."""
    ss = MASK_SUPERSAMPLE
    big = Image.new("L", (CANVAS_SIZE * ss, CANVAS_SIZE * ss), 0)

    if draw_size > 0:
        x0 = round(origin * ss)
        y0 = round((origin + offset_y) * ss)
        side = round(draw_size * ss)
        ImageDraw.Draw(big).rounded_rectangle(
            (x0, y0, x0 + side - 1, y0 + side - 1),
            radius=round(radius * ss),
            fill=255,
        )

    return big.resize((CANVAS_SIZE, CANVAS_SIZE), Image.Resampling.BOX)


def _shadow_layer(origin: float, draw_size: float, radius: float, params: CompositionParameters) -> Image.Image:
    mask = rounded_mask(origin, draw_size, radius, offset_y=params.shadow_y)
    alpha = mask.point(lambda v: round(v * params.shadow_opacity))
    if params.shadow_blur > 0:
        # Canvas-style blur values are twice the Gaussian standard deviation.
        alpha = alpha.filter(ImageFilter.GaussianBlur(params.shadow_blur / 2))

    shadow = Image.new(CANVAS_MODE, (CANVAS_SIZE, CANVAS_SIZE), (0, 0, 0, 0))
    shadow.putalpha(alpha)
    return shadow


def _solid(color: str, mask: Image.Image | None = None) -> Image.Image:
    layer = Image.new(CANVAS_MODE, (CANVAS_SIZE, CANVAS_SIZE), ImageColor.getcolor(color, CANVAS_MODE))
    if mask is not None:
        layer.putalpha(ImageChops.multiply(layer.getchannel("A"), mask))
    return layer


def _artwork_layer(bitmap: Image.Image, origin: float, draw_size: float, scale: float) -> Image.Image:
    x, y, w, h = artwork_box(origin, draw_size, scale, bitmap.width, bitmap.height)

    dx, dy = round(x), round(y)
    dw, dh = max(1, round(w)), max(1, round(h))

    layer = Image.new(CANVAS_MODE, (CANVAS_SIZE, CANVAS_SIZE), TRANSPARENT)

    # Only the part that lands on the canvas is resampled; scales above 1 overhang.
    vx0, vy0 = max(dx, 0), max(dy, 0)
    vx1, vy1 = min(dx + dw, CANVAS_SIZE), min(dy + dh, CANVAS_SIZE)
    if vx0 >= vx1 or vy0 >= vy1:
        return layer

    fx, fy = bitmap.width / dw, bitmap.height / dh
    src_box = ((vx0 - dx) * fx, (vy0 - dy) * fy, (vx1 - dx) * fx, (vy1 - dy) * fy)
    art = bitmap.resize((vx1 - vx0, vy1 - vy0), Image.Resampling.LANCZOS, box=src_box)

    layer.paste(art, (vx0, vy0))
    return layer


def draw_placeholder(layer: Image.Image) -> None:
    """Gray picture glyph at the canvas center: frame, sun, mountain."""
    draw = ImageDraw.Draw(layer)
    c = CANVAS_SIZE / 2
    half = CANVAS_SIZE * 0.125
    stroke = max(1, round(CANVAS_SIZE / 64))

    left, top, right, bottom = c - half, c - half * 0.8, c + half, c + half * 0.8
    draw.rounded_rectangle(
        (round(left), round(top), round(right), round(bottom)),
        radius=round(half * 0.2),
        outline=PLACEHOLDER_COLOR,
        width=stroke,
    )

    sun = half * 0.18
    sx, sy = c + half * 0.4, c - half * 0.35
    draw.ellipse((round(sx - sun), round(sy - sun), round(sx + sun), round(sy + sun)), fill=PLACEHOLDER_COLOR)

    base = bottom - stroke
    draw.polygon(
        [
            (round(left + stroke), round(base)),
            (round(c - half * 0.3), round(c - half * 0.1)),
            (round(c + half * 0.05), round(c + half * 0.35)),
            (round(c + half * 0.3), round(c + half * 0.15)),
            (round(right - stroke), round(base)),
        ],
        fill=PLACEHOLDER_COLOR,
    )


def _as_rgba(bitmap: Image.Image | None) -> Image.Image | None:
    """RGBA copy of the source, or None when there is nothing drawable."""
    if bitmap is None or bitmap.width == 0 or bitmap.height == 0:
        return None
    try:
        return bitmap.convert(CANVAS_MODE)
    except (OSError, ValueError) as e:
        warn(f"Source bitmap ({bitmap.mode} {bitmap.width}x{bitmap.height}) unusable: {e}. Drawing placeholder.")
        return None


def render(bitmap: Image.Image | None, params: CompositionParameters) -> Image.Image:
    """Compose a finished icon raster. Never fails for missing imagery."""
    # 1. Drawable square and clamped radius
    origin, draw_size = drawable_square(params.margin)
    radius = clamp_radius(params.radius, draw_size)
    mask = rounded_mask(origin, draw_size, radius)

    canvas = Image.new(CANVAS_MODE, (CANVAS_SIZE, CANVAS_SIZE), TRANSPARENT)

    # 2. Shadow pass (unclipped), then the shape it is cast by
    if params.shadow_opacity > 0:
        canvas.alpha_composite(_shadow_layer(origin, draw_size, radius, params))
    shape_fill = params.bg_color if params.use_bg else SHADOW_FILL_FALLBACK
    canvas.alpha_composite(_solid(shape_fill, mask))

    # 3. Content, clipped to the mask once finished
    if params.use_bg:
        content = _solid(params.bg_color)
    else:
        content = Image.new(CANVAS_MODE, (CANVAS_SIZE, CANVAS_SIZE), TRANSPARENT)

    art = _as_rgba(bitmap)
    if art is not None and draw_size > 0:
        content.alpha_composite(_artwork_layer(art, origin, draw_size, params.scale))
    else:
        draw_placeholder(content)

    content.putalpha(ImageChops.multiply(content.getchannel("A"), mask))
    canvas.alpha_composite(content)
    return canvas
