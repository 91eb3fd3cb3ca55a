"""
Tests for card catalog loading and validation.

Tests:
- The built-in catalog and starter decks
- Load-time rejection of malformed templates
- Catalog lookups
"""

import pytest

from ..engine_core.state import CardTemplate
from ..games.marvel import MARVEL_CARDS, MARVEL_CATALOG, OPPONENT_DECK_IDS, PLAYER_DECK_IDS
from ..spec_schema.effect_dsl import (
    EffectCategory,
    EffectId,
    FlagEffect,
    ValueEffect,
    effect_value,
    ongoing,
)
from ..spec_schema.validation import CatalogValidationError, load_catalog, validate_catalog


class TestBuiltInCatalog:
    """Tests for the Marvel card set."""

    def test_catalog_is_valid(self):
        result = validate_catalog(MARVEL_CARDS)

        assert result.valid, result.errors
        assert len(MARVEL_CATALOG) == 24

    def test_starter_decks_resolve(self):
        assert len(MARVEL_CATALOG.resolve(PLAYER_DECK_IDS)) == 12
        assert len(MARVEL_CATALOG.resolve(OPPONENT_DECK_IDS)) == 12

    def test_sentinel_keeps_its_id(self):
        assert MARVEL_CATALOG.get(21).name == "Sentinel"

    def test_with_effect(self):
        blockers = MARVEL_CATALOG.with_effect(EffectId.COSMO_BLOCK_ON_REVEAL)

        assert [t.name for t in blockers] == ["Cosmo"]


class TestValidation:
    """Malformed templates are rejected when the catalog loads."""

    def test_duplicate_ids(self):
        result = validate_catalog([CardTemplate(1, "A", 1, 1), CardTemplate(1, "B", 1, 1)])

        assert not result.valid
        assert "Duplicate card id 1" in result.errors

    def test_negative_cost_and_power(self):
        result = validate_catalog([CardTemplate(5, "Broken", -1, -2)])

        assert len(result.errors) == 2

    def test_empty_name(self):
        result = validate_catalog([CardTemplate(6, "", 1, 1)])

        assert "Card 6 has empty name" in result.errors

    def test_wrong_variant(self):
        effect = FlagEffect(EffectCategory.ONGOING, EffectId.PUNISHER_PER_ENEMY)
        result = validate_catalog([CardTemplate(7, "Flagged", 3, 2, "", (effect,))])

        assert not result.valid
        assert "requires ValueEffect" in result.errors[0]

    def test_wrong_category(self):
        effect = ValueEffect(EffectCategory.ON_REVEAL, EffectId.PUNISHER_PER_ENEMY, 1)
        result = validate_catalog([CardTemplate(8, "Early", 3, 2, "", (effect,))])

        assert "punisher_per_enemy cannot fire as on_reveal" in result.errors[0]

    def test_boolean_value_is_not_an_integer(self):
        effect = ValueEffect(EffectCategory.ONGOING, EffectId.NAMOR_ALONE, True)
        result = validate_catalog([CardTemplate(9, "Truthy", 4, 5, "", (effect,))])

        assert "namor_alone value must be an integer" in result.errors[0]

    def test_unsupported_effect_record(self):
        result = validate_catalog([CardTemplate(10, "Odd", 1, 1, "", ("ongoing",))])

        assert "unsupported effect record" in result.errors[0]

    def test_empty_catalog_warns(self):
        result = validate_catalog([])

        assert result.valid
        assert result.warnings == ["Catalog is empty"]

    def test_strict_load_raises(self):
        with pytest.raises(CatalogValidationError) as exc_info:
            load_catalog("bad", [CardTemplate(1, "A", 1, 1), CardTemplate(1, "B", 1, 1)])

        assert exc_info.value.errors == ["Duplicate card id 1"]

    def test_lenient_load_builds_anyway(self):
        catalog = load_catalog("lenient", [CardTemplate(3, "Broken", -1, 1)], strict=False)

        assert 3 in catalog


class TestCatalogLookups:
    """Tests for reading the catalog."""

    def test_get_unknown_is_none(self):
        assert MARVEL_CATALOG.get(999) is None

    def test_resolve_unknown_raises(self):
        with pytest.raises(KeyError, match="Unknown card id 999"):
            MARVEL_CATALOG.resolve([1, 999])

    def test_effect_shorthands(self):
        assert isinstance(ongoing(EffectId.COLOSSUS_IMMUNE), FlagEffect)
        assert effect_value(ongoing(EffectId.NAMOR_ALONE, 5)) == 5
        assert effect_value(ongoing(EffectId.COLOSSUS_IMMUNE)) == 0
