"""Primitive board/resource mutations shared by the resolver and abilities.

Every function here emits the matching event; none of them validate legality.
"""

from __future__ import annotations

from .board import promote_back_to_front
from .state import PLAYERS, CardInstance, MatchState, emit


def gain_gems(state: MatchState, player: int, amount: int, reason: str) -> None:
    if amount <= 0:
        return
    state.players[player].gems += amount
    emit(state, "GEMS_GAINED", player=player, amount=amount, reason=reason)


def reward_recipient(state: MatchState, victim: int) -> int:
    if state.config.gem_reward_policy == "victim":
        return victim
    return state.opponent(victim)


def damage_creature(
    state: MatchState, player: int, pos: int, amount: int, source: int | None
) -> CardInstance | None:
    """Apply damage to the creature at (player, pos). Removal is left to the caller."""
    card = state.players[player].battlefield[pos]
    if card is None:
        return None
    card.hp -= amount
    state.players[player].stats.damage_taken += amount
    if source is not None:
        state.players[source].stats.damage_dealt += amount
    emit(
        state,
        "DAMAGE_CREATURE",
        player=player,
        pos=pos,
        card_id=card.id,
        name=card.name,
        amount=amount,
        hp=card.hp,
        source=source,
    )
    return card


def damage_player(state: MatchState, player: int, amount: int, source: int | None, reason: str) -> None:
    ps = state.players[player]
    ps.life -= amount
    ps.stats.damage_taken += amount
    if source is not None:
        state.players[source].stats.damage_dealt += amount
    emit(
        state,
        "DAMAGE_PLAYER",
        player=player,
        amount=amount,
        life=ps.life,
        source=source,
        reason=reason,
    )


def destroy_creature(state: MatchState, owner: int, pos: int, destroyer: int | None) -> CardInstance | None:
    ps = state.players[owner]
    card = ps.battlefield[pos]
    if card is None:
        return None
    ps.battlefield[pos] = None
    ps.discard.append(card)
    if destroyer is not None:
        state.players[destroyer].stats.creatures_destroyed += 1
    emit(state, "CREATURE_DESTROYED", player=owner, pos=pos, card_id=card.id, name=card.name)
    gain_gems(state, reward_recipient(state, owner), state.config.gem_reward, reason="destruction")
    promote_back_to_front(state, owner)
    return card


def destroy_if_dead(state: MatchState, owner: int, pos: int, destroyer: int | None) -> bool:
    card = state.players[owner].battlefield[pos]
    if card is None or card.hp > 0:
        return False
    destroy_creature(state, owner, pos, destroyer)
    return True


def check_winner(state: MatchState) -> bool:
    """Declare a winner if some player's life is at or below zero.

    Player 1 is examined first, so a simultaneous double knock-out is a win for
    player 2.
    """
    if state.winner is not None:
        return True
    for player in PLAYERS:
        if state.players[player].life <= 0:
            state.winner = state.opponent(player)
            emit(state, "GAME_ENDED", winner=state.winner, loser=player, turn=state.turn_number)
            return True
    return False
