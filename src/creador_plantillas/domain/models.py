"""
Modelos de Dominio (Clean Architecture)
Definen la estructura de datos central del pipeline de plantillas.
"""
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class VideoAsset(BaseModel):
    """Un clip disponible para el video. Lo provee el llamador y no se modifica."""
    model_config = ConfigDict(frozen=True)

    id: str
    url: str = Field(..., min_length=1, description="Única propiedad que llega tal cual al documento")
    title: str = ""
    description: str = ""
    tags: List[str] = Field(default_factory=list)

    def summary(self) -> Dict[str, Any]:
        """Representación compacta para el prompt del planificador."""
        return {
            "id": self.id,
            "url": self.url,
            "title": self.title,
            "description": self.description,
            "tags": list(self.tags),
        }


class ScenePlanEntry(BaseModel):
    """
    Una unidad atómica de narrativa.
    Asocia un fragmento del guion con un clip del pool.
    """
    scene_number: int
    script_text: str = Field(..., description="Texto que se narra en esta escena")
    video_asset: VideoAsset
    reasoning: str = ""


class ScenePlan(BaseModel):
    """El guion completo partido en escenas, en el orden del guion."""
    scenes: List[ScenePlanEntry]

    def __len__(self) -> int:
        return len(self.scenes)

    @property
    def urls(self) -> List[str]:
        return [s.video_asset.url for s in self.scenes]

    def to_prompt(self) -> List[Dict[str, Any]]:
        return [
            {
                "scene_number": s.scene_number,
                "script_text": s.script_text,
                "video_asset": {
                    "id": s.video_asset.id,
                    "url": s.video_asset.url,
                    "title": s.video_asset.title,
                },
                "reasoning": s.reasoning,
            }
            for s in self.scenes
        ]


class CaptionPreset(BaseModel):
    """Estilo de subtítulos con nombre. Los campos ausentes caen a los defaults."""
    model_config = ConfigDict(frozen=True)

    id: str
    name: str = ""
    transcript_color: Optional[str] = None
    transcript_effect: Optional[str] = None
    placement: Optional[str] = None


class CaptionConfiguration(BaseModel):
    """
    Preferencias de subtítulos del usuario. Todos los campos son opcionales y
    se aceptan sin validar: el resolver trata los valores malformados como ausentes.
    """
    model_config = ConfigDict(populate_by_name=True)

    enabled: Any = None
    preset_id: Any = Field(None, alias="presetId")
    placement: Any = None
    transcript_color: Any = Field(None, alias="transcriptColor")
    transcript_effect: Any = Field(None, alias="transcriptEffect")


class BuildRequest(BaseModel):
    """Entrada del orquestador."""
    script: str = Field(..., min_length=1)
    video_assets: List[VideoAsset] = Field(..., alias="videoAssets")
    voice_id: str = Field("", alias="voiceId")
    style_profile: Optional[Dict[str, Any]] = Field(None, alias="styleProfile")
    # Any: el resolver degrada por su cuenta cualquier valor malformado
    caption_configuration: Any = Field(None, alias="captionConfiguration")

    model_config = ConfigDict(populate_by_name=True)
