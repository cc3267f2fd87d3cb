from __future__ import annotations

import json
from pathlib import Path

from cardjam.client.cli import main
from cardjam.engine.ai import ai_take_turn
from cardjam.engine.match import new_match
from cardjam.paths import get_paths
from cardjam.services.content import ContentService
from cardjam.services.messages import describe
from cardjam.services.telemetry import TelemetryService


def _load_catalog():
    paths = get_paths()
    return ContentService(paths.data_dir, paths.schema_dir).load_catalog()


def test_every_engine_event_has_a_message() -> None:
    state = new_match(_load_catalog(), 31)
    for _ in range(60):
        if state.game_over:
            break
        ai_take_turn(state, state.current_player)
    for event in state.event_log:
        text = describe(event)
        assert text
        assert text != event["type"]


def test_describe_examples() -> None:
    assert describe({"type": "GAME_ENDED", "winner": 2, "loser": 1, "turn": 9}) == "Player 2 wins!"
    assert (
        describe({"type": "CREATURE_SUMMONED", "player": 1, "pos": 2, "card_id": "1-0", "name": "Orc", "cost": 2})
        == "Player 1 summons Orc (back-left)."
    )
    assert describe({"type": "SOMETHING_NEW"}) == "SOMETHING_NEW"


def test_telemetry_listener_writes_jsonl(tmp_path: Path) -> None:
    path = tmp_path / "logs" / "events.jsonl"
    telemetry = TelemetryService(path)
    telemetry({"type": "GEMS_GAINED", "player": 1, "amount": 1, "reason": "turn"})
    telemetry.log("NOTE", {"text": "hello"})

    lines = path.read_text(encoding="utf-8").splitlines()
    assert len(lines) == 2
    first = json.loads(lines[0])
    assert first["type"] == "GEMS_GAINED"
    assert first["payload"] == {"player": 1, "amount": 1, "reason": "turn"}
    assert "ts" in first


def test_cli_plays_a_match(tmp_path: Path, capsys) -> None:
    telemetry = tmp_path / "match.jsonl"
    code = main(["--seed", "5", "--max-turns", "40", "--telemetry", str(telemetry)])
    assert code == 0

    out = capsys.readouterr().out
    assert "Match started." in out
    assert "seed=5 turns=" in out
    assert "player 1: life=" in out

    records = [json.loads(line) for line in telemetry.read_text(encoding="utf-8").splitlines()]
    assert records[0]["type"] == "CARD_DRAWN"
    assert any(r["type"] == "MATCH_STARTED" for r in records)


def test_cli_quiet_only_prints_summary(capsys) -> None:
    assert main(["--seed", "5", "--max-turns", "40", "-q", "--difficulty", "hard", "--p1-difficulty", "easy"]) == 0
    out = capsys.readouterr().out
    assert out.startswith("seed=5 turns=")
    assert "Match started." not in out


def test_cli_reports_bad_rules(tmp_path: Path, capsys) -> None:
    rules = tmp_path / "rules.json"
    rules.write_text(json.dumps({"starting_life": 0}), encoding="utf-8")
    assert main(["--seed", "1", "--rules", str(rules)]) == 2
    assert "Schema validation failed" in capsys.readouterr().err


def test_deck_empty_message_follows_policy() -> None:
    quiet = describe({"type": "DECK_EMPTY", "player": 2, "penalty": False})
    penalised = describe({"type": "DECK_EMPTY", "player": 2, "penalty": True})
    assert quiet == "Player 2's deck is empty. No card drawn."
    assert "penalty" in penalised
    assert "No card drawn" not in penalised
