"""Iconwright - Composition parameter record and presets."""
from __future__ import annotations

import math
from dataclasses import dataclass, replace

from PIL import ImageColor


@dataclass(frozen=True)
class CompositionParameters:
    """Complete, immutable input record for a single render call.

    Lengths are in output canvas pixels. The engine reads every field as-is;
    there are no fallbacks inside it.
    """

    radius: float
    margin: float
    shadow_blur: float
    shadow_opacity: float
    shadow_y: float
    bg_color: str
    use_bg: bool
    scale: float

    def __post_init__(self) -> None:
        for name in ("radius", "margin", "shadow_blur", "shadow_opacity", "shadow_y", "scale"):
            if not math.isfinite(getattr(self, name)):
                raise ValueError(f"{name} must be a finite number, got {getattr(self, name)}")
        if self.radius < 0:
            raise ValueError(f"radius must be >= 0, got {self.radius}")
        if self.margin < 0:
            raise ValueError(f"margin must be >= 0, got {self.margin}")
        if self.shadow_blur < 0:
            raise ValueError(f"shadow_blur must be >= 0, got {self.shadow_blur}")
        if not (0.0 <= self.shadow_opacity <= 1.0):
            raise ValueError(f"shadow_opacity must be within [0, 1], got {self.shadow_opacity}")
        if self.scale <= 0:
            raise ValueError(f"scale must be > 0, got {self.scale}")
        # Raises ValueError for anything Pillow cannot parse.
        ImageColor.getrgb(self.bg_color)


# Big Sur style: ~22% corner radius on an 824px shape with a 100px safe area.
DEFAULT_PARAMS = CompositionParameters(
    radius=185,
    margin=100,
    shadow_blur=30,
    shadow_opacity=0.4,
    shadow_y=15,
    bg_color="#ffffff",
    use_bg=True,
    scale=0.78,
)

# Each preset overwrites exactly these fields and leaves the rest untouched.
PRESETS: dict[str, dict[str, float]] = {
    "macos": {
        "radius": 185,
        "margin": 100,
        "shadow_opacity": 0.4,
        "shadow_blur": 30,
        "shadow_y": 15,
        "scale": 0.78,
    },
    "ios": {
        "radius": 190,
        "margin": 60,
        "shadow_opacity": 0,
        "shadow_y": 0,
        "scale": 1.0,
    },
    "circle": {
        "radius": 512,
        "margin": 60,
        "scale": 0.74,
    },
}


def apply_preset(params: CompositionParameters, name: str) -> CompositionParameters:
    """Return a copy of params with the named preset applied in one step."""
    try:
        bundle = PRESETS[name]
    except KeyError:
        raise ValueError(f"Unknown preset {name!r} (expected one of {sorted(PRESETS)})") from None
    return replace(params, **bundle)
