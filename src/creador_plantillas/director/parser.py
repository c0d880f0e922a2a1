"""
Parsers de la salida del LLM.
Validan y convierten las respuestas en objetos de dominio. La respuesta del
LLM nunca se da por buena: cada invariante se comprueba aquí.
"""
import logging
from typing import Any, Dict, List, Optional, Sequence, Union

from ..domain.document import AUDIO_TRACK, CAPTION_TRACK, VIDEO_TRACK, is_caption_element
from ..domain.errors import AssemblyError, PlanningError
from ..domain.models import ScenePlan, ScenePlanEntry, VideoAsset
from ..llm.openrouter import extract_json

logger = logging.getLogger(__name__)


class ScenePlanParser:
    """Validador y parseador de planes de escenas."""

    def parse(
        self,
        raw_input: Union[str, Dict[str, Any]],
        assets: Sequence[VideoAsset],
        script: Optional[str] = None,
    ) -> ScenePlan:
        """
        Convierte la respuesta del planificador en un ScenePlan validado.

        Args:
            raw_input: Texto JSON o dict devuelto por el LLM
            assets: Pool de clips de la petición
            script: Guion original (para avisar si el orden no coincide)

        Raises:
            PlanningError: JSON inválido, escena sin video o URL fuera del pool
        """
        data = extract_json(raw_input) if isinstance(raw_input, str) else raw_input
        if not isinstance(data, dict):
            raise PlanningError("El LLM no devolvió un JSON válido")

        raw_scenes = data.get("scenes")
        if not isinstance(raw_scenes, list) or not raw_scenes:
            raise PlanningError("El plan no contiene escenas", field="scenes")

        pool = {asset.url: asset for asset in assets}
        scenes: List[ScenePlanEntry] = []

        for i, raw_scene in enumerate(raw_scenes):
            if not isinstance(raw_scene, dict):
                raise PlanningError("Escena con formato inválido", scene_index=i)

            text = raw_scene.get("script_text")
            if not isinstance(text, str) or not text.strip():
                raise PlanningError("Escena sin texto", scene_index=i, field="script_text")

            raw_asset = raw_scene.get("video_asset")
            if not isinstance(raw_asset, dict):
                raise PlanningError("Escena sin video asignado", scene_index=i, field="video_asset")

            url = raw_asset.get("url")
            if not isinstance(url, str) or not url:
                raise PlanningError("Video asignado sin URL", scene_index=i, field="video_asset.url")
            if url not in pool:
                raise PlanningError(
                    f"URL que no pertenece a los videos disponibles: {url}",
                    scene_index=i,
                    field="video_asset.url",
                )

            if raw_scene.get("scene_number") != i + 1:
                logger.warning(
                    f"Número de escena desordenado. Esperado {i + 1}, encontrado {raw_scene.get('scene_number')}"
                )

            reasoning = raw_scene.get("reasoning")
            scenes.append(ScenePlanEntry(
                scene_number=i + 1,
                script_text=text.strip(),
                video_asset=pool[url],
                reasoning=reasoning if isinstance(reasoning, str) else "",
            ))

        plan = ScenePlan(scenes=scenes)
        if script:
            self._check_order(plan, script)
        return plan

    def _check_order(self, plan: ScenePlan, script: str) -> None:
        """Avisa si los textos aparecen en el guion en otro orden."""
        last = -1
        for scene in plan.scenes:
            position = script.find(scene.script_text)
            if position == -1:
                # El LLM puede reformular; solo se compara lo que aparece literal
                continue
            if position < last:
                logger.warning(f"Escena {scene.scene_number} fuera del orden del guion")
            last = position


class TemplateParser:
    """
    Comprueba la plantilla generada contra el plan de escenas.
    Devuelve las composiciones con sus tres elementos localizados.
    """

    def parse(self, raw_input: Union[str, Dict[str, Any]], plan: ScenePlan) -> List[Dict[str, dict]]:
        """
        Args:
            raw_input: Texto JSON o dict devuelto por el LLM
            plan: Plan de escenas usado para generar la plantilla

        Returns:
            Lista (una por escena) de {"composition", "video", "audio", "text"}

        Raises:
            AssemblyError: falta un elemento, URL distinta a la del plan o tracks incorrectos
        """
        data = extract_json(raw_input) if isinstance(raw_input, str) else raw_input
        if not isinstance(data, dict):
            raise AssemblyError("El LLM no devolvió un JSON válido")

        compositions = data.get("elements")
        if not isinstance(compositions, list):
            raise AssemblyError("La plantilla no tiene lista de elementos", field="elements")
        if len(compositions) != len(plan.scenes):
            raise AssemblyError(
                f"Se esperaban {len(plan.scenes)} composiciones y llegaron {len(compositions)}",
                field="elements",
            )

        return [
            self._parse_composition(i, composition, scene.video_asset.url)
            for i, (composition, scene) in enumerate(zip(compositions, plan.scenes))
        ]

    def _parse_composition(self, index: int, composition: Any, expected_url: str) -> Dict[str, dict]:
        if not isinstance(composition, dict) or composition.get("type") != "composition":
            raise AssemblyError("El elemento no es una composición", scene_index=index, field="type")

        elements = composition.get("elements")
        if not isinstance(elements, list):
            raise AssemblyError("Composición sin elementos", scene_index=index, field="elements")

        found = {
            "video": self._single(index, elements, "video"),
            "audio": self._single(index, elements, "audio"),
            "text": self._single(index, elements, "text"),
        }

        video = found["video"]
        if video.get("source") != expected_url:
            raise AssemblyError(
                f"Video distinto al asignado en el plan: {video.get('source')!r}",
                scene_index=index,
                field="video.source",
            )

        for kind, track in (("video", VIDEO_TRACK), ("text", CAPTION_TRACK), ("audio", AUDIO_TRACK)):
            if found[kind].get("track") != track:
                raise AssemblyError(
                    f"Track incorrecto: {found[kind].get('track')!r}, se esperaba {track}",
                    scene_index=index,
                    field=f"{kind}.track",
                )

        found["composition"] = composition
        return found

    def _single(self, index: int, elements: list, kind: str) -> dict:
        matches = [el for el in elements if isinstance(el, dict) and el.get("type") == kind]
        if kind == "text" and len(matches) > 1:
            # Otros textos (títulos, etiquetas) no cuentan como subtítulo
            matches = [el for el in matches if is_caption_element(el)] or matches
        if not matches:
            raise AssemblyError(f"Falta el elemento {kind}", scene_index=index, field=kind)
        if len(matches) > 1:
            raise AssemblyError(f"Elemento {kind} duplicado ({len(matches)})", scene_index=index, field=kind)
        return matches[0]
