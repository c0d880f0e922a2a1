"""
Ensamblador de plantillas.
Convierte el plan de escenas en el documento declarativo del renderer:
una composición por escena con video, voz en off y subtítulos.
"""
import json
import logging
import os
from typing import Any, Dict, Optional

from ..captions.presets import DEFAULT_TRANSCRIPT_COLOR, DEFAULT_TRANSCRIPT_EFFECT
from ..director.parser import TemplateParser
from ..domain import document as doc
from ..domain.errors import AssemblyError
from ..domain.models import ScenePlan
from ..utils.backoff import APIError
from ..utils.reference import load_reference
from .openrouter import OpenRouterClient, load_prompts

logger = logging.getLogger(__name__)

# Voz por defecto si la petición no trae una
DEFAULT_VOICE_ID = os.getenv("DEFAULT_VOICE_ID", "NFcw9p0jKu3zbmXieNPE")


class TemplateAssembler:
    """
    Genera la plantilla con el LLM y la reconstruye con la forma fija.

    Todo lo que varía por petición (voz, modelo, perfil) llega como argumento
    de assemble(); la instancia puede compartirse entre peticiones.
    """

    def __init__(
        self,
        llm_client: OpenRouterClient,
        prompts: Optional[dict] = None,
        reference_path: Optional[str] = None,
    ):
        self.llm = llm_client
        self.prompts = prompts if prompts is not None else load_prompts()
        self.reference_path = reference_path
        self.parser = TemplateParser()

    def _build_messages(
        self,
        plan: ScenePlan,
        voice_id: str,
        style_profile: Optional[Dict[str, Any]],
        caption_structure: Optional[dict],
    ) -> tuple[str, str]:
        system_prompt = self.prompts.get("builder_system_prompt")
        user_template = self.prompts.get("builder_user_prompt")
        if not system_prompt or not user_template:
            raise AssemblyError("Template de prompt del ensamblador no encontrado")

        caption_info = ""
        if caption_structure:
            caption_info = (
                "USE THIS EXACT STRUCTURE FOR THE SUBTITLES:\n"
                + json.dumps(caption_structure, indent=2, ensure_ascii=False)
            )

        user_prompt = user_template.format(
            script=" ".join(s.script_text for s in plan.scenes),
            scene_plan=json.dumps(plan.to_prompt(), indent=2, ensure_ascii=False),
            voice_id=voice_id,
            provider=doc.tts_provider(voice_id),
            style_profile=json.dumps(style_profile or {}, ensure_ascii=False),
            caption_info=caption_info,
            reference=load_reference(self.reference_path),
        )
        return system_prompt, user_prompt

    def assemble(
        self,
        plan: ScenePlan,
        voice_id: str,
        style_profile: Optional[Dict[str, Any]] = None,
        model: Optional[str] = None,
        caption_structure: Optional[dict] = None,
    ) -> dict:
        """
        Genera el documento declarativo.

        Args:
            plan: Plan de escenas validado
            voice_id: Voz TTS (la misma para todas las escenas)
            style_profile: Perfil editorial para el prompt
            model: Modelo del LLM para esta petición
            caption_structure: Subtítulo de referencia para el prompt

        Returns:
            Documento con una composición por escena, en el orden del plan

        Raises:
            SchemaLoadError: no se pudo cargar el documento de referencia
            AssemblyError: fallo del LLM o plantilla con estructura incorrecta
        """
        if not plan.scenes:
            raise AssemblyError("Plan de escenas vacío", field="scenes")

        voice_id = voice_id or DEFAULT_VOICE_ID
        system_prompt, user_prompt = self._build_messages(plan, voice_id, style_profile, caption_structure)

        logger.info(f"Generando plantilla para {len(plan.scenes)} escenas (voz {voice_id})...")
        try:
            response = self.llm.complete(system_prompt, user_prompt, model=model, max_tokens=8000)
        except APIError as e:
            raise AssemblyError(f"Fallo la llamada al ensamblador: {e}") from e

        parts = self.parser.parse(response, plan)
        document = self._canonicalize(plan, parts, voice_id)

        logger.info(f"Plantilla ensamblada: {len(document['elements'])} composiciones")
        return document

    def _canonicalize(self, plan: ScenePlan, parts: list, voice_id: str) -> dict:
        """
        Reconstruye cada composición revisada con los valores fijos del contrato.
        Del LLM solo se conserva el id del audio cuando es usable.
        """
        provider = doc.tts_provider(voice_id)
        document = doc.empty_document()
        used_ids: set[str] = set()

        for i, (scene, found) in enumerate(zip(plan.scenes, parts)):
            audio_id = self._audio_id(found["audio"].get("id"), i, used_ids)
            used_ids.add(audio_id)

            if found["video"].get("fit") != "cover":
                logger.debug(f"Escena {i + 1}: fit {found['video'].get('fit')!r} corregido a 'cover'")

            document["elements"].append({
                "type": "composition",
                "track": doc.VIDEO_TRACK,
                "elements": [
                    doc.video_element(scene.video_asset.url),
                    doc.audio_element(audio_id, scene.script_text, provider),
                    doc.caption_element(audio_id, DEFAULT_TRANSCRIPT_EFFECT, DEFAULT_TRANSCRIPT_COLOR),
                ],
            })

        return document

    @staticmethod
    def _audio_id(candidate: Any, index: int, used: set) -> str:
        if isinstance(candidate, str) and candidate.strip() and candidate.strip() not in used:
            return candidate.strip()

        base = f"voiceover-{index + 1}"
        audio_id, n = base, 1
        while audio_id in used:
            n += 1
            audio_id = f"{base}-{n}"
        return audio_id
