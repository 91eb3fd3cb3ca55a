"""Card ability schema - effect DSL, catalog container and load-time validation."""

from .effect_dsl import (
    CardEffect,
    EffectCategory,
    EffectId,
    FlagEffect,
    ValueEffect,
    EFFECT_SIGNATURES,
)
from .catalog import CardCatalog
from .validation import (
    CatalogValidationError,
    ValidationResult,
    load_catalog,
    validate_catalog,
)

__all__ = [
    "CardEffect",
    "EffectCategory",
    "EffectId",
    "FlagEffect",
    "ValueEffect",
    "EFFECT_SIGNATURES",
    "CardCatalog",
    "CatalogValidationError",
    "ValidationResult",
    "load_catalog",
    "validate_catalog",
]
