"""Módulo de subtítulos: presets y resolución de la configuración del usuario."""

from .presets import PLACEMENT_MAPPING, PresetRegistry, load_registry
from .resolver import apply_captions, caption_structure, resolve_caption_style

__all__ = [
    "PLACEMENT_MAPPING",
    "PresetRegistry",
    "load_registry",
    "apply_captions",
    "caption_structure",
    "resolve_caption_style",
]
