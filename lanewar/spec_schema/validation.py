"""
Catalog Validation - Load-time checks for card templates.

Validates that:
1. Card ids are unique
2. Cost and power are non-negative integers
3. Every effect uses the variant its identifier requires
4. Every effect is declared under a category its identifier can fire in

Handlers trust the catalog once it has passed these checks.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Iterable, TYPE_CHECKING

from .catalog import CardCatalog
from .effect_dsl import EFFECT_SIGNATURES, EffectCategory, EffectId, FlagEffect, ValueEffect

if TYPE_CHECKING:
    from ..engine_core.state import CardTemplate


class CatalogValidationError(Exception):
    """Raised when a card catalog fails validation."""

    def __init__(self, errors: list[str]):
        self.errors = errors
        super().__init__(f"Catalog validation failed with {len(errors)} error(s)")


@dataclass
class ValidationResult:
    """Result of validation, with errors and warnings."""
    valid: bool
    errors: list[str]
    warnings: list[str]


def validate_catalog(templates: Iterable[CardTemplate]) -> ValidationResult:
    """
    Validate a list of card templates.

    Returns ValidationResult with errors and warnings.
    """
    errors: list[str] = []
    warnings: list[str] = []
    seen: set[int] = set()
    templates = list(templates)

    for template in templates:
        if template.card_id in seen:
            errors.append(f"Duplicate card id {template.card_id}")
        seen.add(template.card_id)
        errors.extend(_validate_template(template))

    if not templates:
        warnings.append("Catalog is empty")

    return ValidationResult(
        valid=len(errors) == 0,
        errors=errors,
        warnings=warnings,
    )


def _validate_template(template: CardTemplate) -> list[str]:
    """Validate a single card template."""
    errors = []
    label = f"Card {template.card_id} ({template.name or '?'})"
    if not template.name:
        errors.append(f"Card {template.card_id} has empty name")
    if not isinstance(template.cost, int) or template.cost < 0:
        errors.append(f"{label}: cost must be a non-negative integer")
    if not isinstance(template.power, int) or template.power < 0:
        errors.append(f"{label}: power must be a non-negative integer")

    for effect in template.effects:
        errors.extend(f"{label}: {e}" for e in _validate_effect(effect))
    return errors


def _validate_effect(effect) -> list[str]:
    errors = []
    if not isinstance(effect, (ValueEffect, FlagEffect)):
        return [f"unsupported effect record {effect!r}"]
    if not isinstance(effect.effect_id, EffectId):
        return [f"unknown effect id {effect.effect_id!r}"]
    if not isinstance(effect.category, EffectCategory):
        return [f"unknown effect category {effect.category!r}"]

    signature = EFFECT_SIGNATURES.get(effect.effect_id)
    if signature is None:
        return [f"no signature registered for {effect.effect_id.value}"]

    if not isinstance(effect, signature.variant):
        errors.append(
            f"{effect.effect_id.value} requires {signature.variant.__name__}, "
            f"got {type(effect).__name__}"
        )
    if effect.category not in signature.categories:
        errors.append(
            f"{effect.effect_id.value} cannot fire as {effect.category.value}"
        )
    if isinstance(effect, ValueEffect):
        if isinstance(effect.value, bool) or not isinstance(effect.value, int):
            errors.append(f"{effect.effect_id.value} value must be an integer")
    return errors


def load_catalog(
    name: str, templates: Iterable[CardTemplate], strict: bool = True
) -> CardCatalog:
    """
    Validate templates and build a catalog.

    Raises CatalogValidationError when strict and errors exist.
    """
    templates = list(templates)
    result = validate_catalog(templates)
    if strict and not result.valid:
        raise CatalogValidationError(result.errors)
    return CardCatalog.from_templates(name, templates)
