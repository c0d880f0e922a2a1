"""Módulo LLM: cliente, planificador de escenas y ensamblador de plantillas."""

from .openrouter import OpenRouterClient, extract_json

__all__ = ["OpenRouterClient", "extract_json"]
