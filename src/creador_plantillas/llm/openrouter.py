"""
Cliente para OpenRouter API.
Compatible con el SDK de OpenAI.
"""

import json
import logging
import os
import re
from functools import lru_cache
from pathlib import Path
from typing import Optional

import openai
import yaml
from dotenv import load_dotenv
from openai import OpenAI

from ..utils.backoff import APIError, ClientNotConfiguredError, default_attempts, with_retry

load_dotenv()
logger = logging.getLogger(__name__)

PROMPTS_PATH = Path(__file__).resolve().parent.parent / "config" / "prompts.yaml"

DEFAULT_BASE_URL = "https://openrouter.ai/api/v1"
DEFAULT_MODEL = "openai/gpt-4.1"

# Errores transitorios del SDK que vale la pena reintentar
RETRYABLE_ERRORS = (
    openai.APIConnectionError,
    openai.APITimeoutError,
    openai.RateLimitError,
    openai.InternalServerError,
)


@lru_cache(maxsize=None)
def load_prompts(path: Optional[str] = None) -> dict:
    """Carga los prompts desde YAML (una vez por proceso)."""
    path = path or str(PROMPTS_PATH)
    try:
        with open(path, "r", encoding="utf-8") as f:
            return yaml.safe_load(f) or {}
    except FileNotFoundError:
        logger.warning(f"Archivo de prompts no encontrado: {path}")
        return {}


def _load_object(text: str) -> Optional[dict]:
    # RecursionError: anidamiento absurdo en la respuesta
    try:
        data = json.loads(text)
    except (json.JSONDecodeError, RecursionError):
        return None
    return data if isinstance(data, dict) else None


def extract_json(text: Optional[str]) -> Optional[dict]:
    """
    Extrae JSON de la respuesta del LLM.
    Maneja casos donde el JSON está envuelto en markdown o texto.
    """
    if not text or not text.strip():
        return None

    # Intentar parsear directamente
    data = _load_object(text)
    if data is not None:
        return data

    # Buscar JSON en bloques de código
    candidates = re.findall(r"```(?:json)?\s*([\s\S]*?)\s*```", text)

    # Objeto entre la primera llave y la última
    start, end = text.find("{"), text.rfind("}")
    if start != -1 and end > start:
        candidates.append(text[start:end + 1])

    for candidate in candidates:
        clean = candidate.strip()
        if not clean.startswith("{"):
            continue
        data = _load_object(clean)
        if data is not None:
            return data

    logger.error("No se pudo extraer JSON de la respuesta")
    return None


class OpenRouterClient:
    """
    Cliente de completions JSON.

    Solo guarda configuración de solo lectura (credenciales, URL, modelo por
    defecto). El modelo de cada petición se pasa en cada llamada.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        default_model: Optional[str] = None,
        max_attempts: Optional[int] = None,
    ):
        """
        Inicializa el cliente de OpenRouter.

        Args:
            api_key: Clave de API (por defecto OPENROUTER_API_KEY)
            base_url: Endpoint compatible con OpenAI (por defecto LLM_BASE_URL u OpenRouter)
            default_model: Modelo cuando la llamada no indica uno (LLM_MODEL_PRIMARY)
            max_attempts: Intentos por llamada (LLM_MAX_ATTEMPTS)
        """
        self.api_key = api_key or os.getenv("OPENROUTER_API_KEY")
        self.base_url = base_url or os.getenv("LLM_BASE_URL", DEFAULT_BASE_URL)
        self.default_model = default_model or os.getenv("LLM_MODEL_PRIMARY", DEFAULT_MODEL)
        self.max_attempts = max_attempts or default_attempts()

        if not self.api_key:
            logger.warning("OPENROUTER_API_KEY no configurada")
            self.client = None
        else:
            self.client = OpenAI(base_url=self.base_url, api_key=self.api_key)

    @property
    def is_configured(self) -> bool:
        return self.client is not None

    def _create(self, messages: list[dict], model: str, temperature: float, max_tokens: int, json_mode: bool):
        kwargs = {}
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}
        return self.client.chat.completions.create(
            model=model,
            messages=messages,
            temperature=temperature,
            max_tokens=max_tokens,
            extra_headers={
                "HTTP-Referer": "https://github.com/creador-plantillas",
                "X-Title": "Creador de Plantillas",
            },
            **kwargs,
        )

    def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        model: Optional[str] = None,
        temperature: float = 0.4,
        max_tokens: int = 4000,
        json_mode: bool = True,
    ) -> str:
        """
        Llama al LLM con una instrucción de sistema y un mensaje de usuario.

        Args:
            system_prompt: Instrucción de sistema
            user_prompt: Contenido del usuario
            model: Modelo a usar (usa el default si es None)
            temperature: Temperatura de generación
            max_tokens: Máximo de tokens a generar
            json_mode: Pedir respuesta en formato JSON

        Returns:
            Texto de la respuesta

        Raises:
            APIError: cliente sin configurar, fallo de la llamada o respuesta vacía
        """
        if not self.client:
            raise ClientNotConfiguredError("Cliente OpenRouter no configurado")

        model = model or self.default_model
        messages = [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": user_prompt},
        ]

        call = with_retry(
            max_attempts=self.max_attempts,
            min_wait=2.0,
            max_wait=30.0,
            exceptions=RETRYABLE_ERRORS,
        )(self._create)

        try:
            response = call(messages, model, temperature, max_tokens, json_mode)
        except openai.OpenAIError as e:
            logger.error(f"Error llamando a {model}: {e}")
            raise APIError(f"Fallo la llamada a {model}: {e}") from e

        if not response.choices:
            raise APIError(f"{model} no devolvió opciones")

        content = response.choices[0].message.content
        if not content:
            raise APIError(f"{model} devolvió una respuesta vacía")

        logger.debug(f"Respuesta de {model}: {len(content)} chars")
        return content


def main():
    """Prueba de conexión."""
    import argparse
    from rich.console import Console
    from rich.json import JSON
    from rich.panel import Panel

    parser = argparse.ArgumentParser(description="OpenRouter LLM Client")
    parser.add_argument("--model", type=str, help="Modelo a usar")
    args = parser.parse_args()

    console = Console()
    client = OpenRouterClient()

    if not client.is_configured:
        console.print("[red]Error: OPENROUTER_API_KEY no configurada[/red]")
        console.print("Configura la variable en tu archivo .env")
        return

    console.print("[cyan]Test de conexión con OpenRouter...[/cyan]")
    try:
        text = client.complete(
            "Reply with a JSON object.",
            'Return {"status": "ok"}',
            model=args.model,
        )
    except APIError as e:
        console.print(f"[red]✗ Error en la conexión: {e}[/red]")
        return

    data = extract_json(text)
    if data is None:
        console.print(f"[red]✗ Respuesta no es JSON: {text[:200]}[/red]")
        return
    console.print("[green]✓ Conexión exitosa[/green]")
    console.print(Panel(JSON(json.dumps(data, ensure_ascii=False)), title="Respuesta"))


if __name__ == "__main__":
    main()
