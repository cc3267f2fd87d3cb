from __future__ import annotations

import dataclasses
import json
from pathlib import Path

import pytest

from cardjam.engine.state import MatchConfig
from cardjam.engine.types import AbilityKind, Trigger
from cardjam.paths import get_paths
from cardjam.services.content import ContentError, ContentService


def _content(data_dir: Path | None = None) -> ContentService:
    paths = get_paths()
    return ContentService(data_dir or paths.data_dir, paths.schema_dir)


def _write_cards(tmp_path: Path, cards: list[dict[str, object]]) -> Path:
    (tmp_path / "cards.json").write_text(json.dumps({"version": 1, "cards": cards}), encoding="utf-8")
    return tmp_path


def test_content_schemas_validate() -> None:
    _content().validate_all()


def test_catalog_contents() -> None:
    catalog = _content().load_catalog()
    assert len(catalog.cards) == 8
    dragon = catalog.get("dragon")
    assert (dragon.hp, dragon.attack, dragon.cost) == (4, 4, 4)
    assert dragon.ability is AbilityKind.MIGHTY
    assert dragon.timing is Trigger.ON_DIRECT_ATTACK
    assert {t.ability for t in catalog.templates()} == set(AbilityKind)


def test_default_rules_match_config_defaults() -> None:
    assert _content().load_rules() == MatchConfig()


def test_partial_rules_override(tmp_path: Path) -> None:
    path = tmp_path / "rules.json"
    path.write_text(json.dumps({"deck_out_policy": "penalty_damage", "counter_attack": False}), encoding="utf-8")
    config = _content().load_rules(path)
    assert config.deck_out_policy == "penalty_damage"
    assert not config.counter_attack
    assert config.starting_life == 20


def test_invalid_rules_are_rejected(tmp_path: Path) -> None:
    path = tmp_path / "rules.json"
    for raw in ({"starting_life": "twenty"}, {"surprise": 1}, {"discard_policy": "newest"}):
        path.write_text(json.dumps(raw), encoding="utf-8")
        with pytest.raises(ContentError):
            _content().load_rules(path)


def test_malformed_json_is_reported(tmp_path: Path) -> None:
    path = tmp_path / "rules.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(ContentError, match="Invalid JSON"):
        _content().load_rules(path)
    with pytest.raises(ContentError, match="Missing content file"):
        _content().load_rules(tmp_path / "absent.json")


def test_invalid_card_stats_are_rejected(tmp_path: Path) -> None:
    data_dir = _write_cards(tmp_path, [{"id": "blob", "name": "Blob", "hp": 0, "attack": 1, "cost": 1, "ability": None}])
    with pytest.raises(ContentError):
        _content(data_dir).load_catalog()


def test_unknown_ability_is_rejected(tmp_path: Path) -> None:
    data_dir = _write_cards(tmp_path, [{"id": "blob", "name": "Blob", "hp": 2, "attack": 1, "cost": 1, "ability": "flight"}])
    with pytest.raises(ContentError):
        _content(data_dir).load_catalog()


def test_duplicate_card_ids_are_rejected(tmp_path: Path) -> None:
    blob = {"id": "blob", "name": "Blob", "hp": 2, "attack": 1, "cost": 1, "ability": None}
    data_dir = _write_cards(tmp_path, [blob, dict(blob)])
    with pytest.raises(ContentError, match="Duplicate"):
        _content(data_dir).load_catalog()


def test_every_config_field_is_a_rule_key() -> None:
    paths = get_paths()
    fields = {f.name for f in dataclasses.fields(MatchConfig)}
    schema = json.loads((paths.schema_dir / "rules.schema.json").read_text(encoding="utf-8"))
    defaults = json.loads((paths.data_dir / "rules.json").read_text(encoding="utf-8"))
    assert set(schema["properties"]) == fields
    assert set(defaults) == fields
