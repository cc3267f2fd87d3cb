from __future__ import annotations

from .actions import Action, AttackAction, EndTurnAction, SummonAction, SwapAction
from .state import PLAYERS, CardInstance, MatchState, PlayerState, PlayerStats


def action_to_dict(a: Action) -> dict[str, object]:
    if isinstance(a, SummonAction):
        return {
            "type": "summon",
            "player": a.player,
            "hand_index": a.hand_index,
            "position": a.position,
        }
    if isinstance(a, AttackAction):
        return {
            "type": "attack",
            "player": a.player,
            "attacker_pos": a.attacker_pos,
            "target_pos": a.target_pos,
        }
    if isinstance(a, SwapAction):
        return {"type": "swap", "player": a.player, "position": a.position}
    if isinstance(a, EndTurnAction):
        return {"type": "end_turn", "player": a.player}
    # should be unreachable
    return {"type": "unknown"}


def _card_to_dict(c: CardInstance | None) -> dict[str, object] | None:
    if c is None:
        return None
    return {
        "id": c.id,
        "template_id": c.template_id,
        "name": c.name,
        "hp": c.hp,
        "max_hp": c.max_hp,
        "attack": c.attack,
        "cost": c.cost,
        "ability": c.ability.value if c.ability is not None else None,
    }


def _stats_to_dict(s: PlayerStats) -> dict[str, int]:
    return {
        "damage_dealt": s.damage_dealt,
        "damage_taken": s.damage_taken,
        "creatures_summoned": s.creatures_summoned,
        "creatures_destroyed": s.creatures_destroyed,
        "gems_spent": s.gems_spent,
    }


def _player_to_dict(p: PlayerState) -> dict[str, object]:
    return {
        "life": p.life,
        "gems": p.gems,
        "action_points": p.action_points,
        "hand": [_card_to_dict(c) for c in p.hand],
        "deck": [c.id for c in p.deck],
        "battlefield": [_card_to_dict(c) for c in p.battlefield],
        "discard": [c.id for c in p.discard],
        "first_turn_completed": p.first_turn_completed,
        "can_attack_this_turn": p.can_attack_this_turn,
        "stats": _stats_to_dict(p.stats),
    }


def snapshot(state: MatchState) -> dict[str, object]:
    """Return a JSON-serializable canonical snapshot of the current match state."""
    return {
        "seed": state.seed,
        "current_player": state.current_player,
        "turn_number": state.turn_number,
        "game_over": state.game_over,
        "winner": state.winner,
        "players": {str(p): _player_to_dict(state.players[p]) for p in PLAYERS},
        "action_log": [action_to_dict(a) for a in state.action_log],
    }


def match_summary(state: MatchState) -> dict[str, object]:
    """End-of-match statistics for both players."""
    return {
        "turns": state.turn_number,
        "winner": state.winner,
        "players": {
            str(p): {"life": state.players[p].life, **_stats_to_dict(state.players[p].stats)}
            for p in PLAYERS
        },
    }
