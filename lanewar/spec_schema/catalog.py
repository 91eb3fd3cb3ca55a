"""
Card Catalog - Read-only table of card templates keyed by integer id.

Built once at process start from a list of templates and validated on
construction; never mutated afterwards.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Iterable, Iterator, TYPE_CHECKING

from .effect_dsl import EffectId

if TYPE_CHECKING:
    from ..engine_core.state import CardTemplate


@dataclass(frozen=True)
class CardCatalog:
    """Immutable id -> template mapping."""
    name: str
    _cards: dict[int, CardTemplate] = field(default_factory=dict)

    @classmethod
    def from_templates(cls, name: str, templates: Iterable[CardTemplate]) -> CardCatalog:
        return cls(name=name, _cards={t.card_id: t for t in templates})

    def get(self, card_id: int) -> CardTemplate | None:
        return self._cards.get(card_id)

    def __contains__(self, card_id: int) -> bool:
        return card_id in self._cards

    def __iter__(self) -> Iterator[CardTemplate]:
        return iter(self._cards.values())

    def __len__(self) -> int:
        return len(self._cards)

    def resolve(self, card_ids: Iterable[int]) -> list[CardTemplate]:
        """Templates for a deck list. Raises KeyError on an unknown id."""
        templates = []
        for card_id in card_ids:
            template = self._cards.get(card_id)
            if template is None:
                raise KeyError(f"Unknown card id {card_id} in catalog '{self.name}'")
            templates.append(template)
        return templates

    def with_effect(self, effect_id: EffectId) -> list[CardTemplate]:
        return [t for t in self._cards.values() if t.has_effect(effect_id)]
