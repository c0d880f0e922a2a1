"""
Cache en memoria del documento de referencia del renderer.
Se lee una sola vez por proceso y nunca se modifica.
"""

import logging
from functools import lru_cache
from pathlib import Path
from typing import Optional

from ..domain.errors import SchemaLoadError

logger = logging.getLogger(__name__)

DEFAULT_REFERENCE_PATH = Path(__file__).resolve().parent.parent / "docs" / "creatomate.md"


@lru_cache(maxsize=None)
def _read_reference(path: str) -> str:
    # lru_cache no guarda excepciones: un fallo se reintenta en la siguiente llamada
    try:
        with open(path, "r", encoding="utf-8") as f:
            text = f.read()
    except OSError as e:
        logger.error(f"Error cargando documento de referencia {path}: {e}")
        raise SchemaLoadError(f"No se pudo cargar el documento de referencia: {path}") from e

    if not text.strip():
        raise SchemaLoadError(f"Documento de referencia vacío: {path}")

    logger.info(f"Documento de referencia cargado ({len(text)} chars)")
    return text


def load_reference(path: Optional[str] = None) -> str:
    """
    Devuelve el texto de referencia del esquema del renderer.

    Args:
        path: Ruta alternativa (por defecto el documento empaquetado)

    Raises:
        SchemaLoadError: si el archivo no existe o está vacío
    """
    return _read_reference(str(path or DEFAULT_REFERENCE_PATH))


def clear_reference_cache() -> None:
    """Olvida el texto cacheado (usado en tests)."""
    _read_reference.cache_clear()
