"""Creature abilities, dispatched through a table keyed by (timing, kind).

Handlers return an integer adjustment: bonus damage for attack timings, damage
reduction for guard, and 0 for everything else. With `preview=True` a handler
only reports its adjustment and leaves the match untouched; the AI relies on
this to project damage.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from .board import front_row
from .effects import damage_creature, damage_player, destroy_if_dead, gain_gems
from .state import CardInstance, MatchState, emit
from .types import AbilityKind, Trigger


@dataclass
class AbilityContext:
    state: MatchState
    player: int
    pos: int
    card: CardInstance
    # The other creature involved (the attacker for on-death abilities).
    other_player: int | None = None
    other_pos: int | None = None
    other_card: CardInstance | None = None
    preview: bool = False


Handler = Callable[[AbilityContext], int]


def _announce(ctx: AbilityContext, trigger: Trigger) -> None:
    assert ctx.card.ability is not None
    emit(
        ctx.state,
        "ABILITY_TRIGGERED",
        player=ctx.player,
        pos=ctx.pos,
        card_id=ctx.card.id,
        name=ctx.card.name,
        ability=ctx.card.ability.value,
        trigger=trigger.value,
    )


def _greed(ctx: AbilityContext) -> int:
    _announce(ctx, Trigger.ON_SUMMON)
    gain_gems(ctx.state, ctx.player, 1, reason="greed")
    return 0


def _magic(ctx: AbilityContext) -> int:
    state = ctx.state
    enemy = state.opponent(ctx.player)
    targets = front_row(state.players[enemy])
    if not targets:
        return 0
    _announce(ctx, Trigger.ON_SUMMON)
    pos, _ = state.rng.choice(targets)
    damage_creature(state, enemy, pos, 1, source=ctx.player)
    destroy_if_dead(state, enemy, pos, destroyer=ctx.player)
    return 0


def _berserk(ctx: AbilityContext) -> int:
    if ctx.preview:
        return 1
    _announce(ctx, Trigger.ON_ATTACK)
    damage_creature(ctx.state, ctx.player, ctx.pos, 1, source=None)
    destroy_if_dead(ctx.state, ctx.player, ctx.pos, destroyer=None)
    return 1


def _poison(ctx: AbilityContext) -> int:
    state = ctx.state
    if ctx.other_player is None or ctx.other_pos is None or ctx.other_card is None:
        return 0
    attacker = state.players[ctx.other_player].battlefield[ctx.other_pos]
    # The attacker may already be gone (berserk, counter-attack).
    if attacker is not ctx.other_card or not attacker.alive:
        return 0
    _announce(ctx, Trigger.ON_DEATH)
    damage_creature(state, ctx.other_player, ctx.other_pos, 1, source=ctx.player)
    destroy_if_dead(state, ctx.other_player, ctx.other_pos, destroyer=ctx.player)
    return 0


def _curse(ctx: AbilityContext) -> int:
    if ctx.other_player is None:
        return 0
    _announce(ctx, Trigger.ON_DEATH)
    # Only fires inside an attack, whose own win check runs once the board settles.
    damage_player(ctx.state, ctx.other_player, 1, source=ctx.player, reason="curse")
    return 0


def _regenerate(ctx: AbilityContext) -> int:
    card = ctx.card
    if card.hp >= card.max_hp:
        return 0
    _announce(ctx, Trigger.ON_TURN_START)
    card.hp += 1
    emit(ctx.state, "HEAL_CREATURE", player=ctx.player, pos=ctx.pos, card_id=card.id, name=card.name, amount=1, hp=card.hp)
    return 0


def _mighty(ctx: AbilityContext) -> int:
    if not ctx.preview:
        _announce(ctx, Trigger.ON_DIRECT_ATTACK)
    return 1


def _guard(ctx: AbilityContext) -> int:
    return 1


HANDLERS: dict[tuple[Trigger, AbilityKind], Handler] = {
    (Trigger.ON_SUMMON, AbilityKind.GREED): _greed,
    (Trigger.ON_SUMMON, AbilityKind.MAGIC): _magic,
    (Trigger.ON_ATTACK, AbilityKind.BERSERK): _berserk,
    (Trigger.ON_DEATH, AbilityKind.POISON): _poison,
    (Trigger.ON_DEATH, AbilityKind.CURSE): _curse,
    (Trigger.ON_TURN_START, AbilityKind.REGENERATE): _regenerate,
    (Trigger.ON_DIRECT_ATTACK, AbilityKind.MIGHTY): _mighty,
    (Trigger.PASSIVE_GUARD, AbilityKind.GUARD): _guard,
}


def fire(trigger: Trigger, ctx: AbilityContext) -> int:
    if not ctx.state.config.abilities or ctx.card.ability is None:
        return 0
    handler = HANDLERS.get((trigger, ctx.card.ability))
    if handler is None:
        return 0
    return handler(ctx)


def guard_reduction(state: MatchState, defender: int) -> int:
    """Total direct-damage reduction granted by the defender's front row."""
    total = 0
    for pos, card in front_row(state.players[defender]):
        total += fire(Trigger.PASSIVE_GUARD, AbilityContext(state, defender, pos, card, preview=True))
    return total


def fire_turn_start(state: MatchState, player: int) -> None:
    for pos, card in state.players[player].creatures():
        fire(Trigger.ON_TURN_START, AbilityContext(state, player, pos, card))
