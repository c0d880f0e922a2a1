"""
Errores tipados del pipeline de plantillas.
Cada etapa que puede fallar tiene su propia clase para que el llamador
decida si reintenta el build completo.
"""
from typing import Optional


class PipelineError(Exception):
    """Base de todos los errores del pipeline."""

    def __init__(
        self,
        message: str,
        scene_index: Optional[int] = None,
        field: Optional[str] = None,
    ):
        self.scene_index = scene_index
        self.field = field
        details = []
        if scene_index is not None:
            details.append(f"escena {scene_index + 1}")
        if field:
            details.append(f"campo '{field}'")
        if details:
            message = f"{message} ({', '.join(details)})"
        super().__init__(message)


class SchemaLoadError(PipelineError):
    """No se pudo cargar el documento de referencia del renderer."""


class PlanningError(PipelineError):
    """El planificador de escenas falló o devolvió un plan inválido."""


class AssemblyError(PipelineError):
    """El ensamblador devolvió una plantilla que no respeta la estructura por escena."""


class BuildRequestError(PipelineError):
    """La petición de build no tiene la forma esperada."""


class ValidationFailure(PipelineError):
    """El documento final no pasó el validador estructural."""

    def __init__(self, errors: list[str]):
        self.errors = list(errors)
        summary = "; ".join(self.errors[:5])
        if len(self.errors) > 5:
            summary += f" (+{len(self.errors) - 5} más)"
        super().__init__(f"Documento inválido: {summary}")
