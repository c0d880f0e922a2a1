"""
Resolución de la configuración de subtítulos.

Toma el documento generado y las preferencias del usuario y devuelve un
documento nuevo con los subtítulos estilizados (o eliminados). Nunca lanza:
cualquier valor malformado se trata como ausente y cae al preset o al default.

Precedencia por campo (color, efecto y posición se resuelven por separado):
    1. override explícito y válido en la configuración
    2. campo del preset indicado por presetId
    3. campo del preset por defecto (presetId ausente, desconocido o no string)
    4. valor por defecto fijo
"""

import copy
import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from pydantic import BaseModel

from ..domain.document import (
    CAPTION_TRACK,
    CAPTION_WIDTH,
    CAPTION_X_ALIGNMENT,
    is_caption_element,
    iter_compositions,
)
from .presets import (
    DEFAULT_PLACEMENT,
    DEFAULT_TRANSCRIPT_COLOR,
    DEFAULT_TRANSCRIPT_EFFECT,
    PLACEMENT_MAPPING,
    PresetRegistry,
    is_hex_color,
    is_placement,
    is_transcript_effect,
    load_registry,
)

logger = logging.getLogger(__name__)

# Claves aceptadas por campo: camelCase (cliente móvil) y snake_case
_KEYS = {
    "enabled": ("enabled",),
    "preset_id": ("presetId", "preset_id"),
    "placement": ("placement",),
    "transcript_color": ("transcriptColor", "transcript_color"),
    "transcript_effect": ("transcriptEffect", "transcript_effect"),
}


@dataclass(frozen=True)
class CaptionStyle:
    """Resultado de resolver una configuración."""
    enabled: bool
    preset_id: str
    transcript_color: str
    transcript_effect: str
    placement: str

    @property
    def y_alignment(self) -> str:
        return PLACEMENT_MAPPING[self.placement]


def _as_mapping(config: Any) -> Mapping:
    if isinstance(config, BaseModel):
        return config.model_dump(by_alias=True)
    if isinstance(config, Mapping):
        return config
    return {}


def _field(config: Mapping, name: str) -> Any:
    for key in _KEYS[name]:
        if key in config and config[key] is not None:
            return config[key]
    return None


def _pick(override: Any, is_valid, preset_value: Any, default_preset_value: Any, fallback: str) -> str:
    for candidate in (override, preset_value, default_preset_value):
        if is_valid(candidate):
            return candidate
    return fallback


def resolve_caption_style(config: Any = None, registry: Optional[PresetRegistry] = None) -> CaptionStyle:
    """
    Resuelve la configuración del usuario a un estilo concreto.

    Args:
        config: Mapping, CaptionConfiguration, None o cualquier otro valor
        registry: Registro de presets (por defecto el empaquetado)

    Returns:
        CaptionStyle con todos los campos definidos
    """
    registry = registry or load_registry()
    cfg = _as_mapping(config)

    # Solo un False explícito desactiva; "no", 0 o "false" se ignoran
    enabled = _field(cfg, "enabled") is not False

    requested = _field(cfg, "preset_id")
    preset = registry.get(requested)
    if preset is None:
        if requested is not None:
            logger.warning(f"Preset de subtítulos desconocido: {requested!r}, usando '{registry.default_id}'")
        preset = registry.default
    default_preset = registry.default

    color = _pick(
        _field(cfg, "transcript_color"), is_hex_color,
        preset.transcript_color, default_preset.transcript_color,
        DEFAULT_TRANSCRIPT_COLOR,
    )
    effect = _pick(
        _field(cfg, "transcript_effect"), is_transcript_effect,
        preset.transcript_effect, default_preset.transcript_effect,
        DEFAULT_TRANSCRIPT_EFFECT,
    )
    placement = _pick(
        _field(cfg, "placement"), is_placement,
        preset.placement, default_preset.placement,
        DEFAULT_PLACEMENT,
    )

    return CaptionStyle(
        enabled=enabled,
        preset_id=preset.id,
        transcript_color=color,
        transcript_effect=effect,
        placement=placement,
    )


def apply_captions(document: Any, config: Any = None, registry: Optional[PresetRegistry] = None) -> Any:
    """
    Aplica la configuración de subtítulos a una copia del documento.

    Args:
        document: Documento declarativo (no se modifica)
        config: Configuración del usuario; puede ser None o malformada
        registry: Registro de presets

    Returns:
        Documento nuevo
    """
    result = copy.deepcopy(document)
    if not isinstance(result, dict):
        return result

    style = resolve_caption_style(config, registry)

    if not style.enabled:
        removed = 0
        for composition in iter_compositions(result):
            kept = [el for el in composition["elements"] if not is_caption_element(el)]
            removed += len(composition["elements"]) - len(kept)
            composition["elements"] = kept
        logger.info(f"Subtítulos desactivados: {removed} elementos eliminados")
        return result

    styled = 0
    for composition in iter_compositions(result):
        for element in composition["elements"]:
            if is_caption_element(element):
                element["transcript_color"] = style.transcript_color
                element["transcript_effect"] = style.transcript_effect
                element["y_alignment"] = style.y_alignment
                styled += 1

    logger.info(
        f"Subtítulos: preset={style.preset_id} color={style.transcript_color} "
        f"efecto={style.transcript_effect} posición={style.placement} ({styled} elementos)"
    )
    return result


def caption_structure(config: Any = None, registry: Optional[PresetRegistry] = None) -> Optional[dict]:
    """
    Elemento de subtítulo de ejemplo para el prompt del ensamblador.
    None si los subtítulos están desactivados.
    """
    style = resolve_caption_style(config, registry)
    if not style.enabled:
        return None
    return {
        "type": "text",
        "track": CAPTION_TRACK,
        "width": CAPTION_WIDTH,
        "x_alignment": CAPTION_X_ALIGNMENT,
        "y_alignment": style.y_alignment,
        "transcript_effect": style.transcript_effect,
        "transcript_color": style.transcript_color,
    }
