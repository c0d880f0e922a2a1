"""
Reintentos para llamadas a APIs externas.
Implementa exponential backoff sobre tenacity.
"""

import logging
import os

from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
    before_sleep_log,
)

logger = logging.getLogger(__name__)


def default_attempts() -> int:
    """Número de intentos configurado en LLM_MAX_ATTEMPTS (mínimo 1)."""
    try:
        return max(1, int(os.getenv("LLM_MAX_ATTEMPTS", "3")))
    except ValueError:
        logger.warning("LLM_MAX_ATTEMPTS inválido, usando 3")
        return 3


def with_retry(
    max_attempts: int = 3,
    min_wait: float = 1.0,
    max_wait: float = 60.0,
    exceptions: tuple = (Exception,),
):
    """
    Decorador para reintentar funciones con exponential backoff.

    Args:
        max_attempts: Número máximo de intentos
        min_wait: Tiempo mínimo de espera entre intentos (segundos)
        max_wait: Tiempo máximo de espera entre intentos (segundos)
        exceptions: Tupla de excepciones a capturar

    Returns:
        Decorador configurado
    """
    return retry(
        stop=stop_after_attempt(max_attempts),
        wait=wait_exponential(multiplier=1, min=min_wait, max=max_wait),
        retry=retry_if_exception_type(exceptions),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )


class APIError(Exception):
    """Error genérico de API."""
    pass


class ClientNotConfiguredError(APIError):
    """El cliente no tiene credenciales; reintentar no sirve de nada."""
    pass
