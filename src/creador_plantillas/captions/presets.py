"""
Registro de presets de subtítulos.
Se carga una vez por proceso desde YAML y es de solo lectura.
"""

import logging
import re
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Mapping, Optional

import yaml
from pydantic import ValidationError

from ..domain.document import PLACEMENT_MAPPING
from ..domain.models import CaptionPreset

logger = logging.getLogger(__name__)

PRESETS_PATH = Path(__file__).resolve().parent.parent / "config" / "caption_presets.yaml"

DEFAULT_PRESET_ID = "karaoke"
DEFAULT_TRANSCRIPT_COLOR = "#04f827"
DEFAULT_TRANSCRIPT_EFFECT = "karaoke"
DEFAULT_PLACEMENT = "bottom"

TRANSCRIPT_EFFECTS = frozenset({"karaoke", "highlight", "fade", "bounce", "slide", "enlarge"})

_HEX_COLOR = re.compile(r"^#(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6}|[0-9a-fA-F]{8})$")

_BUILTIN_DEFAULT = CaptionPreset(
    id=DEFAULT_PRESET_ID,
    name="Karaoke",
    transcript_color=DEFAULT_TRANSCRIPT_COLOR,
    transcript_effect=DEFAULT_TRANSCRIPT_EFFECT,
    placement=DEFAULT_PLACEMENT,
)


def is_hex_color(value) -> bool:
    return isinstance(value, str) and bool(_HEX_COLOR.match(value))


def is_transcript_effect(value) -> bool:
    return isinstance(value, str) and value in TRANSCRIPT_EFFECTS


def is_placement(value) -> bool:
    return isinstance(value, str) and value in PLACEMENT_MAPPING


class PresetRegistry:
    """Conjunto cerrado de presets, indexado por id."""

    def __init__(self, presets: Mapping[str, CaptionPreset], default_id: str = DEFAULT_PRESET_ID):
        self._presets = MappingProxyType(dict(presets))
        if default_id not in self._presets:
            logger.warning(f"Preset por defecto '{default_id}' ausente, usando el integrado")
            merged = dict(self._presets)
            merged[_BUILTIN_DEFAULT.id] = _BUILTIN_DEFAULT
            self._presets = MappingProxyType(merged)
            default_id = _BUILTIN_DEFAULT.id
        self.default_id = default_id

    def __contains__(self, preset_id) -> bool:
        return isinstance(preset_id, str) and preset_id in self._presets

    def __iter__(self):
        return iter(self._presets.values())

    def __len__(self) -> int:
        return len(self._presets)

    @property
    def default(self) -> CaptionPreset:
        return self._presets[self.default_id]

    def get(self, preset_id) -> Optional[CaptionPreset]:
        """Busca un preset; ids que no son string o desconocidos devuelven None."""
        if not isinstance(preset_id, str):
            return None
        return self._presets.get(preset_id)

    def resolve(self, preset_id) -> CaptionPreset:
        """Como get(), pero cae al preset por defecto."""
        return self.get(preset_id) or self.default


def _parse_presets(data: dict) -> PresetRegistry:
    presets: dict[str, CaptionPreset] = {}
    default_id: Optional[str] = None

    for i, raw in enumerate((data or {}).get("presets") or []):
        if not isinstance(raw, dict):
            logger.warning(f"Preset {i + 1}: entrada inválida, se ignora")
            continue
        try:
            preset = CaptionPreset(**{k: v for k, v in raw.items() if k != "default"})
        except ValidationError as e:
            logger.warning(f"Preset {i + 1}: {e.error_count()} errores de validación, se ignora")
            continue

        if preset.id in presets:
            logger.warning(f"Preset duplicado '{preset.id}', se conserva el primero")
            continue
        presets[preset.id] = preset
        if raw.get("default") is True and default_id is None:
            default_id = preset.id

    return PresetRegistry(presets, default_id=default_id or DEFAULT_PRESET_ID)


@lru_cache(maxsize=None)
def load_registry(path: Optional[str] = None) -> PresetRegistry:
    """
    Carga el registro de presets.

    Args:
        path: Ruta al YAML (por defecto el empaquetado)

    Returns:
        PresetRegistry; si el archivo falta o es ilegible, solo el preset integrado
    """
    path = path or str(PRESETS_PATH)
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except FileNotFoundError:
        logger.warning(f"Archivo de presets no encontrado: {path}")
        data = None
    except (OSError, yaml.YAMLError) as e:
        logger.error(f"Error leyendo presets {path}: {e}")
        data = None

    if not isinstance(data, dict):
        return PresetRegistry({_BUILTIN_DEFAULT.id: _BUILTIN_DEFAULT})

    registry = _parse_presets(data)
    logger.debug(f"{len(registry)} presets de subtítulos cargados")
    return registry
