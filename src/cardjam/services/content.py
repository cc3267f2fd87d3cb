from __future__ import annotations

import dataclasses
import json
import logging
from pathlib import Path
from typing import Mapping

from jsonschema import Draft202012Validator

from cardjam.engine.state import MatchConfig
from cardjam.engine.types import AbilityKind, CardCatalog, CardTemplate

logger = logging.getLogger(__name__)


class ContentError(RuntimeError):
    pass


def _load_json(path: Path) -> object:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise ContentError(f"Missing content file: {path}") from e
    except json.JSONDecodeError as e:
        raise ContentError(f"Invalid JSON in {path}: {e}") from e


def _load_schema(path: Path) -> object:
    return _load_json(path)


def validate_json(instance: object, schema: object, *, context: str) -> None:
    validator = Draft202012Validator(schema)
    errors = sorted(validator.iter_errors(instance), key=lambda e: e.path)
    if errors:
        lines = [f"Schema validation failed for {context}:"]
        for err in errors[:10]:
            loc = "/".join(str(p) for p in err.absolute_path)
            lines.append(f"- {loc}: {err.message}")
        raise ContentError("\n".join(lines))


def _require_str(obj: Mapping[str, object], key: str) -> str:
    v = obj.get(key)
    if not isinstance(v, str):
        raise ContentError(f"Expected string for {key}")
    return v


def _require_int(obj: Mapping[str, object], key: str) -> int:
    v = obj.get(key)
    if not isinstance(v, int) or isinstance(v, bool):
        raise ContentError(f"Expected int for {key}")
    return v


def _optional_str(obj: Mapping[str, object], key: str) -> str | None:
    v = obj.get(key)
    if v is None:
        return None
    if not isinstance(v, str):
        raise ContentError(f"Expected string for {key}")
    return v


def _parse_ability(raw: str | None) -> AbilityKind | None:
    if raw is None:
        return None
    try:
        return AbilityKind(raw)
    except ValueError as e:
        raise ContentError(f"Unknown ability: {raw}") from e


def parse_catalog(raw: object) -> CardCatalog:
    if not isinstance(raw, dict):
        raise ContentError("cards.json must be an object")
    raw_cards = raw.get("cards")
    if not isinstance(raw_cards, list):
        raise ContentError("cards.json.cards must be a list")

    cards: dict[str, CardTemplate] = {}
    for item in raw_cards:
        if not isinstance(item, dict):
            continue
        card = CardTemplate(
            id=_require_str(item, "id"),
            name=_require_str(item, "name"),
            hp=_require_int(item, "hp"),
            attack=_require_int(item, "attack"),
            cost=_require_int(item, "cost"),
            ability=_parse_ability(_optional_str(item, "ability")),
            ability_text=_optional_str(item, "ability_text"),
        )
        if card.id in cards:
            raise ContentError(f"Duplicate card id: {card.id}")
        cards[card.id] = card
    return CardCatalog(cards=cards)


class ContentService:
    def __init__(self, data_dir: Path, schema_dir: Path) -> None:
        self._data_dir = data_dir
        self._schema_dir = schema_dir

    def load_catalog(self) -> CardCatalog:
        cards_path = self._data_dir / "cards.json"
        raw = _load_json(cards_path)
        schema = _load_schema(self._schema_dir / "cards.schema.json")
        validate_json(raw, schema, context=str(cards_path))
        catalog = parse_catalog(raw)
        logger.debug("Loaded %d card templates from %s", len(catalog.cards), cards_path)
        return catalog

    def load_rules(self, path: Path | None = None) -> MatchConfig:
        """Read a rule set; keys left out keep their MatchConfig defaults."""
        rules_path = path or self._data_dir / "rules.json"
        raw = _load_json(rules_path)
        schema = _load_schema(self._schema_dir / "rules.schema.json")
        validate_json(raw, schema, context=str(rules_path))
        if not isinstance(raw, dict):
            raise ContentError("rules must be an object")

        known = {f.name for f in dataclasses.fields(MatchConfig)}
        overrides = {k: v for k, v in raw.items() if k in known}
        logger.debug("Loaded rules from %s: %s", rules_path, overrides)
        return dataclasses.replace(MatchConfig(), **overrides)

    def validate_all(self) -> None:
        # Load is validation (schema + parse)
        _ = self.load_catalog()
        _ = self.load_rules()
