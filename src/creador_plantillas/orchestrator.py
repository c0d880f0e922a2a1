"""
Orquestador de builds.
Coordina planificador, ensamblador, subtítulos y validador para convertir
un guion y un pool de clips en el documento del renderer.
"""
import logging
from typing import Any, Mapping, Optional, Union

from pydantic import ValidationError

from .captions.presets import PresetRegistry
from .captions.resolver import apply_captions, caption_structure, resolve_caption_style
from .director.validator import StructuralValidator
from .domain.errors import BuildRequestError, ValidationFailure
from .domain.models import BuildRequest
from .llm.openrouter import OpenRouterClient
from .llm.scene_planner import ScenePlanner
from .llm.template_builder import TemplateAssembler

logger = logging.getLogger(__name__)


class BuildOrchestrator:
    """
    El 'Director de Orquesta'.
    Único punto de entrada para los colaboradores externos.

    No guarda nada por petición: varias llamadas a build() pueden correr en
    paralelo sobre la misma instancia.
    """

    def __init__(
        self,
        llm_client: Optional[OpenRouterClient] = None,
        planner: Optional[ScenePlanner] = None,
        assembler: Optional[TemplateAssembler] = None,
        validator: Optional[StructuralValidator] = None,
        registry: Optional[PresetRegistry] = None,
    ):
        llm_client = llm_client or OpenRouterClient()

        # Subsistemas
        self.planner = planner or ScenePlanner(llm_client)
        self.assembler = assembler or TemplateAssembler(llm_client)
        self.validator = validator or StructuralValidator()
        # None: el registro empaquetado, cargado de forma perezosa
        self.registry = registry

    @staticmethod
    def _coerce_request(request: Union[BuildRequest, Mapping[str, Any]]) -> BuildRequest:
        if isinstance(request, BuildRequest):
            return request
        try:
            return BuildRequest.model_validate(request)
        except ValidationError as e:
            raise BuildRequestError(f"Petición inválida: {e.error_count()} errores\n{e}") from e

    def build(self, request: Union[BuildRequest, Mapping[str, Any]], model: Optional[str] = None) -> dict:
        """
        Ejecuta el pipeline completo.

        Args:
            request: BuildRequest o dict con la misma forma
            model: Modelo del LLM para las dos llamadas de esta petición

        Returns:
            Documento validado, listo para el renderer

        Raises:
            BuildRequestError: petición malformada
            PlanningError: fallo del planificador
            SchemaLoadError: documento de referencia no disponible
            AssemblyError: fallo del ensamblador
            ValidationFailure: el documento final no pasó el validador
        """
        request = self._coerce_request(request)
        captions = request.caption_configuration

        # 1. Plan de escenas
        logger.info("Paso 1: planificando escenas...")
        plan = self.planner.plan(request.script, request.video_assets, model=model)

        # 2. Plantilla
        logger.info("Paso 2: ensamblando plantilla...")
        template = self.assembler.assemble(
            plan,
            request.voice_id,
            style_profile=request.style_profile,
            model=model,
            caption_structure=caption_structure(captions, self.registry),
        )

        # 3. Subtítulos
        logger.info("Paso 3: aplicando configuración de subtítulos...")
        document = apply_captions(template, captions, self.registry)

        # 4. Validación final
        logger.info("Paso 4: validando documento...")
        require_captions = resolve_caption_style(captions, self.registry).enabled
        result = self.validator.validate(document, require_captions=require_captions)
        for warning in result.warnings:
            logger.warning(warning)
        if not result:
            logger.error(f"Documento inválido: {len(result.errors)} errores")
            raise ValidationFailure(result.errors)

        logger.info(f"✅ Documento listo: {len(document['elements'])} escenas")
        return document


def build_document(request: Union[BuildRequest, Mapping[str, Any]], model: Optional[str] = None) -> dict:
    """Atajo: build con un orquestador nuevo y la configuración del entorno."""
    return BuildOrchestrator().build(request, model=model)
