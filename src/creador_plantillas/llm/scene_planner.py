"""
Planificador de escenas.
Parte el guion en escenas y asigna a cada una un clip del pool.
"""
import json
import logging
from typing import Optional, Sequence

from ..director.parser import ScenePlanParser
from ..domain.errors import PlanningError
from ..domain.models import ScenePlan, VideoAsset
from ..utils.backoff import APIError
from .openrouter import OpenRouterClient, load_prompts

logger = logging.getLogger(__name__)


class ScenePlanner:
    """
    Generador del plan de escenas.
    No guarda estado por petición: el modelo se pasa en cada llamada.
    """

    def __init__(self, llm_client: OpenRouterClient, prompts: Optional[dict] = None):
        self.llm = llm_client
        self.prompts = prompts if prompts is not None else load_prompts()
        self.parser = ScenePlanParser()

    def _build_messages(self, script: str, assets: Sequence[VideoAsset]) -> tuple[str, str]:
        system_prompt = self.prompts.get("planner_system_prompt")
        user_template = self.prompts.get("planner_user_prompt")
        if not system_prompt or not user_template:
            raise PlanningError("Template de prompt del planificador no encontrado")

        user_prompt = user_template.format(
            script=script,
            assets=json.dumps([a.summary() for a in assets], indent=2, ensure_ascii=False),
        )
        return system_prompt, user_prompt

    def plan(self, script: str, assets: Sequence[VideoAsset], model: Optional[str] = None) -> ScenePlan:
        """
        Genera el plan de escenas.

        Args:
            script: Guion de narración
            assets: Clips disponibles (no vacío)
            model: Modelo del LLM para esta petición

        Returns:
            ScenePlan con al menos una escena; cada URL pertenece al pool

        Raises:
            PlanningError: pool vacío, fallo del LLM o respuesta inválida
        """
        if not assets:
            raise PlanningError("No hay videos disponibles para planificar", field="video_assets")
        if not script or not script.strip():
            raise PlanningError("Guion vacío", field="script")

        system_prompt, user_prompt = self._build_messages(script, assets)
        logger.info(f"Planificando escenas con {len(assets)} videos disponibles...")

        try:
            response = self.llm.complete(system_prompt, user_prompt, model=model)
        except APIError as e:
            raise PlanningError(f"Fallo la llamada al planificador: {e}") from e

        plan = self.parser.parse(response, assets, script=script)

        reused = len(plan.scenes) - len(set(plan.urls))
        logger.info(f"Plan generado: {len(plan.scenes)} escenas ({reused} videos reutilizados)")
        return plan
