from __future__ import annotations

from cardjam.engine.abilities import HANDLERS
from cardjam.engine.actions import AttackAction, EndTurnAction, SummonAction
from cardjam.engine.match import new_match, projected_damage, step
from cardjam.engine.state import CardInstance, MatchConfig
from cardjam.engine.types import ABILITY_TIMING, AbilityKind
from cardjam.paths import get_paths
from cardjam.services.content import ContentService


def _load_catalog():
    paths = get_paths()
    return ContentService(paths.data_dir, paths.schema_dir).load_catalog()


def _new(deck_card: str = "orc", config: MatchConfig | None = None):
    deck = [deck_card] * 15
    return new_match(_load_catalog(), seed=3, config=config, first_player=1, decks={1: deck, 2: deck})


def _place(state, player: int, pos: int, template_id: str) -> CardInstance:
    card = CardInstance.from_template(state.catalog.get(template_id), f"t{player}-{pos}")
    state.players[player].battlefield[pos] = card
    return card


def _ready(state, player: int = 1) -> None:
    state.players[player].can_attack_this_turn = True
    state.players[player].action_points = 2


def _types(result) -> list[object]:
    return [e["type"] for e in result.events]


def test_every_ability_has_exactly_one_handler() -> None:
    assert len(HANDLERS) == len(AbilityKind)
    for kind, timing in ABILITY_TIMING.items():
        assert (timing, kind) in HANDLERS


def test_greed_refunds_a_gem_on_summon() -> None:
    state = _new("goblin")
    res = step(state, SummonAction(player=1, hand_index=0, position=0))
    assert res.ok
    assert state.players[1].gems == 2
    gained = [e for e in res.events if e["type"] == "GEMS_GAINED"]
    assert gained and gained[0]["reason"] == "greed"


def test_greed_is_inert_when_abilities_are_disabled() -> None:
    state = _new("goblin", MatchConfig(abilities=False))
    assert step(state, SummonAction(player=1, hand_index=0, position=0)).ok
    assert state.players[1].gems == 1


def test_magic_pings_an_enemy_front_creature() -> None:
    state = _new("wizard")
    state.players[1].gems = 3
    slime = _place(state, 2, 0, "slime")
    res = step(state, SummonAction(player=1, hand_index=0, position=1))
    assert res.ok
    assert "ABILITY_TRIGGERED" in _types(res)
    assert slime.hp == 4


def test_magic_can_destroy_and_rewards_the_summoner() -> None:
    state = _new("wizard")
    state.players[1].gems = 3
    goblin = _place(state, 2, 0, "goblin")
    troll = _place(state, 2, 2, "troll")
    assert step(state, SummonAction(player=1, hand_index=0, position=1)).ok
    assert goblin in state.players[2].discard
    assert state.players[2].battlefield[0] is troll
    assert state.players[1].gems == 1
    assert state.players[1].stats.creatures_destroyed == 1


def test_magic_without_targets_does_nothing() -> None:
    state = _new("wizard")
    state.players[1].gems = 3
    _place(state, 2, 2, "troll")  # back row is out of reach
    res = step(state, SummonAction(player=1, hand_index=0, position=1))
    assert res.ok
    assert "ABILITY_TRIGGERED" not in _types(res)
    assert state.players[2].battlefield[2].hp == 5


def test_berserk_adds_damage_and_hurts_itself() -> None:
    state = _new()
    _ready(state)
    orc = _place(state, 1, 0, "orc")
    slime = _place(state, 2, 0, "slime")
    assert step(state, AttackAction(player=1, attacker_pos=0, target_pos=0)).ok
    assert slime.hp == 2
    assert orc.hp == 1  # one from berserk, one from the counter


def test_berserk_self_destruct_still_lands_without_counter() -> None:
    state = _new()
    _ready(state)
    orc = _place(state, 1, 0, "orc")
    orc.hp = 1
    troll = _place(state, 1, 2, "troll")
    slime = _place(state, 2, 0, "slime")

    res = step(state, AttackAction(player=1, attacker_pos=0, target_pos=0))
    assert res.ok
    assert orc in state.players[1].discard
    assert state.players[1].battlefield[0] is troll
    assert troll.hp == 5
    assert slime.hp == 2
    assert "COUNTER_ATTACK" not in _types(res)
    assert state.players[2].gems == 1


def test_poison_strikes_back_at_the_attacker() -> None:
    state = _new()
    _ready(state)
    knight = _place(state, 1, 0, "knight")
    slime = _place(state, 2, 0, "slime")
    slime.hp = 2
    gems = state.players[1].gems

    res = step(state, AttackAction(player=1, attacker_pos=0, target_pos=0))
    assert res.ok
    assert "COUNTER_ATTACK" not in _types(res)
    assert slime in state.players[2].discard
    assert knight.hp == 2
    assert state.players[1].gems == gems + 1


def test_poison_can_destroy_the_attacker() -> None:
    state = _new()
    _ready(state)
    knight = _place(state, 1, 0, "knight")
    knight.hp = 1
    slime = _place(state, 2, 0, "slime")
    slime.hp = 2
    gems = state.players[1].gems

    assert step(state, AttackAction(player=1, attacker_pos=0, target_pos=0)).ok
    assert knight in state.players[1].discard
    assert slime in state.players[2].discard
    assert state.players[1].battlefield == [None, None, None, None]
    assert state.players[2].battlefield == [None, None, None, None]
    assert state.players[1].gems == gems + 1
    assert state.players[2].gems == 1


def test_curse_drains_the_attacking_player() -> None:
    state = _new()
    _ready(state)
    _place(state, 1, 0, "knight")
    skeleton = _place(state, 2, 0, "skeleton")
    assert step(state, AttackAction(player=1, attacker_pos=0, target_pos=0)).ok
    assert skeleton in state.players[2].discard
    assert state.players[1].life == 19


def test_curse_can_decide_the_match() -> None:
    state = _new()
    _ready(state)
    state.players[1].life = 1
    _place(state, 1, 0, "knight")
    _place(state, 2, 0, "skeleton")
    assert step(state, AttackAction(player=1, attacker_pos=0, target_pos=0)).ok
    assert state.winner == 2
    assert [e["type"] for e in state.event_log].count("GAME_ENDED") == 1
    assert state.event_log[-1]["type"] == "GAME_ENDED"


def test_regenerate_heals_at_turn_start() -> None:
    state = _new()
    troll = _place(state, 2, 0, "troll")
    troll.hp = 3
    assert step(state, EndTurnAction(player=1)).ok
    assert troll.hp == 4


def test_regenerate_stops_at_full_health() -> None:
    state = _new()
    troll = _place(state, 2, 0, "troll")
    res = step(state, EndTurnAction(player=1))
    assert troll.hp == 5
    assert "HEAL_CREATURE" not in _types(res)


def test_mighty_adds_direct_damage() -> None:
    state = _new()
    _ready(state)
    _place(state, 1, 1, "dragon")
    assert step(state, AttackAction(player=1, attacker_pos=1)).ok
    assert state.players[2].life == 15


def test_guard_reduces_direct_damage() -> None:
    state = _new()
    _ready(state)
    _place(state, 1, 1, "dragon")
    _place(state, 2, 0, "knight")
    res = step(state, AttackAction(player=1, attacker_pos=1))
    assert res.ok
    reduced = [e for e in res.events if e["type"] == "DAMAGE_REDUCED"]
    assert reduced and reduced[0]["amount"] == 1
    assert state.players[2].life == 16


def test_guard_only_counts_from_the_front_row() -> None:
    state = _new()
    _ready(state)
    _place(state, 1, 1, "dragon")
    _place(state, 2, 0, "goblin")
    _place(state, 2, 2, "knight")
    assert step(state, AttackAction(player=1, attacker_pos=1)).ok
    assert state.players[2].life == 15


def test_abilities_toggle_disables_attack_modifiers() -> None:
    state = _new(config=MatchConfig(abilities=False))
    _ready(state)
    _place(state, 1, 1, "dragon")
    _place(state, 2, 0, "knight")
    assert step(state, AttackAction(player=1, attacker_pos=1)).ok
    assert state.players[2].life == 16


def test_projected_damage_matches_resolution_without_mutating() -> None:
    state = _new()
    _ready(state)
    orc = _place(state, 1, 0, "orc")
    _place(state, 1, 1, "dragon")
    _place(state, 2, 0, "knight")
    assert projected_damage(state, 1, 0, direct=False) == 3
    assert projected_damage(state, 1, 1, direct=True) == 4
    assert orc.hp == 3
    assert not any(e["type"] == "ABILITY_TRIGGERED" for e in state.event_log)
