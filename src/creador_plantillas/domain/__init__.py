"""Modelos de dominio y errores del pipeline."""

from .errors import (
    AssemblyError,
    BuildRequestError,
    PipelineError,
    PlanningError,
    SchemaLoadError,
    ValidationFailure,
)
from .models import BuildRequest, CaptionConfiguration, CaptionPreset, ScenePlan, ScenePlanEntry, VideoAsset

__all__ = [
    "AssemblyError",
    "BuildRequestError",
    "PipelineError",
    "PlanningError",
    "SchemaLoadError",
    "ValidationFailure",
    "BuildRequest",
    "CaptionConfiguration",
    "CaptionPreset",
    "ScenePlan",
    "ScenePlanEntry",
    "VideoAsset",
]
