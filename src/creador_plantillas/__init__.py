"""
Creador de Plantillas.
Convierte un guion y un pool de clips en el documento declarativo del renderer.
"""

from .captions.resolver import apply_captions
from .orchestrator import BuildOrchestrator, build_document

__all__ = ["BuildOrchestrator", "build_document", "apply_captions"]
