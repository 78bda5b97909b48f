"""Iconwright Core - Shared constants and composition parameters."""
from .params import (
    CompositionParameters,
    DEFAULT_PARAMS,
    PRESETS,
    apply_preset,
)

__all__ = ["CompositionParameters", "DEFAULT_PARAMS", "PRESETS", "apply_preset"]
