"""Human-readable one-liners for engine events."""

from __future__ import annotations

from typing import Callable, Mapping

Formatter = Callable[[Mapping[str, object]], str]

_POSITION_NAMES = ("front-left", "front-right", "back-left", "back-right")


def _pos(value: object) -> str:
    if isinstance(value, int) and 0 <= value < len(_POSITION_NAMES):
        return _POSITION_NAMES[value]
    return "?"


def _attack(e: Mapping[str, object]) -> str:
    if e.get("target_pos") is None:
        return f"Player {e['player']}'s {e['name']} attacks player {e['target_player']} directly."
    return f"Player {e['player']}'s {e['name']} attacks the {_pos(e['target_pos'])} creature."


def _swap(e: Mapping[str, object]) -> str:
    if e.get("backward_name") is None:
        return f"{e['forward_name']} moves to the front row."
    return f"{e['forward_name']} and {e['backward_name']} trade places."


def _deck_empty(e: Mapping[str, object]) -> str:
    if e.get("penalty"):
        return f"Player {e['player']}'s deck is empty and the deck-out penalty applies!"
    return f"Player {e['player']}'s deck is empty. No card drawn."


def _turn_started(e: Mapping[str, object]) -> str:
    text = f"Turn {e['turn']}: player {e['player']}'s turn."
    if e.get("first_turn"):
        text += " No attacks this turn."
    return text


_FORMATTERS: dict[str, Formatter] = {
    "MATCH_STARTED": lambda e: f"Match started. Player {e['first_player']} goes first.",
    "TURN_STARTED": _turn_started,
    "TURN_ENDED": lambda e: f"Player {e['player']} ends the turn.",
    "CARD_DRAWN": lambda e: f"Player {e['player']} draws {e['name']}.",
    "CARD_DISCARDED": lambda e: f"Player {e['player']} discards {e['name']}.",
    "DECK_EMPTY": _deck_empty,
    "CREATURE_SUMMONED": lambda e: f"Player {e['player']} summons {e['name']} ({_pos(e['pos'])}).",
    "ATTACK_DECLARED": _attack,
    "COUNTER_ATTACK": lambda e: f"{e['name']} strikes back for {e['amount']}!",
    "DAMAGE_CREATURE": lambda e: f"{e['name']} takes {e['amount']} damage (HP {e['hp']}).",
    "DAMAGE_PLAYER": lambda e: f"Player {e['player']} takes {e['amount']} damage (life {e['life']}).",
    "DAMAGE_REDUCED": lambda e: f"Guard reduces the damage by {e['amount']}.",
    "HEAL_CREATURE": lambda e: f"{e['name']} recovers {e['amount']} HP (HP {e['hp']}).",
    "CREATURE_DESTROYED": lambda e: f"{e['name']} is destroyed!",
    "CREATURE_PROMOTED": lambda e: f"{e['name']} moves up to the {_pos(e['to_pos'])} slot.",
    "CREATURES_SWAPPED": _swap,
    "GEMS_GAINED": lambda e: f"Player {e['player']} gains {e['amount']} gem(s).",
    "ABILITY_TRIGGERED": lambda e: f"{e['name']}'s {e['ability']} activates!",
    "ACTION_REJECTED": lambda e: f"Player {e['player']} cannot {e['action']}: {e['message']}",
    "GAME_ENDED": lambda e: f"Player {e['winner']} wins!",
}


def describe(event: Mapping[str, object]) -> str:
    fmt = _FORMATTERS.get(str(event.get("type")))
    if fmt is None:
        return str(event.get("type", "UNKNOWN"))
    return fmt(event)
