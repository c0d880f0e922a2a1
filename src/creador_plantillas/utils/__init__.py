"""Módulo de utilidades"""

from .backoff import APIError, with_retry
from .reference import load_reference

__all__ = ["APIError", "with_retry", "load_reference"]
