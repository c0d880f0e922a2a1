from .validator import StructuralValidator, ValidationResult

__all__ = ["StructuralValidator", "ValidationResult"]
