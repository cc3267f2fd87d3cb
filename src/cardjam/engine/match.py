from __future__ import annotations

import random
from typing import Iterable, Mapping, Sequence

from .abilities import AbilityContext, fire, fire_turn_start, guard_reduction
from .actions import Action, AttackAction, EndTurnAction, SummonAction, SwapAction
from .board import (
    blocker_for,
    column_of,
    front_of,
    is_position,
    is_valid_attack_target,
    promote_back_to_front,
    row_of,
)
from .deck import build_deck, draw_card
from .effects import (
    check_winner,
    damage_creature,
    damage_player,
    destroy_creature,
    destroy_if_dead,
    gain_gems,
    reward_recipient,
)
from .state import (
    PLAYERS,
    CardInstance,
    EventListener,
    MatchConfig,
    MatchState,
    PlayerState,
    StepResult,
    emit,
)
from .types import CardCatalog, Row, Trigger


def _action_name(action: Action) -> str:
    if isinstance(action, SummonAction):
        return "summon"
    if isinstance(action, AttackAction):
        return "attack"
    if isinstance(action, SwapAction):
        return "swap"
    if isinstance(action, EndTurnAction):
        return "end_turn"
    return "unknown"


def _reject(state: MatchState, action: Action, reason: str, message: str) -> StepResult:
    event = emit(
        state,
        "ACTION_REJECTED",
        player=action.player,
        action=_action_name(action),
        reason=reason,
        message=message,
    )
    return StepResult(ok=False, events=[event], error=message)


# --- turn state machine ---------------------------------------------------


def start_turn(state: MatchState, player: int, skip_draw: bool = False) -> None:
    if state.game_over:
        return
    cfg = state.config
    ps = state.players[player]
    first_turn = not ps.first_turn_completed

    emit(state, "TURN_STARTED", player=player, turn=state.turn_number, first_turn=first_turn)

    if not skip_draw:
        draw_card(state, player)
        if state.game_over:
            return

    gain_gems(state, player, cfg.first_turn_gems if first_turn else cfg.turn_gems, reason="turn")
    ps.action_points = cfg.max_action_points
    # No attacks on a player's own first turn; summons and swaps are fine.
    ps.can_attack_this_turn = not first_turn

    fire_turn_start(state, player)


def _end_turn(state: MatchState, action: EndTurnAction) -> StepResult | None:
    ps = state.players[action.player]
    ps.first_turn_completed = True
    ps.can_attack_this_turn = True
    emit(state, "TURN_ENDED", player=action.player, turn=state.turn_number)

    state.current_player = state.opponent(action.player)
    state.turn_number += 1
    start_turn(state, state.current_player)
    return None


# --- summon / swap ----------------------------------------------------------


def _summon(state: MatchState, action: SummonAction) -> StepResult | None:
    ps = state.players[action.player]
    if action.hand_index < 0 or action.hand_index >= len(ps.hand):
        return _reject(state, action, "no_card", "No card at that hand index.")
    if not is_position(action.position):
        return _reject(state, action, "invalid_position", "Invalid battlefield position.")
    card = ps.hand[action.hand_index]
    if ps.gems < card.cost:
        return _reject(state, action, "insufficient_gems", "Not enough gems.")
    if ps.action_points < 1:
        return _reject(state, action, "insufficient_action_points", "Not enough action points.")
    if ps.battlefield[action.position] is not None:
        return _reject(state, action, "slot_occupied", "That slot is already occupied.")

    ps.gems -= card.cost
    ps.action_points -= 1
    ps.stats.gems_spent += card.cost
    ps.stats.creatures_summoned += 1
    ps.hand.pop(action.hand_index)
    ps.battlefield[action.position] = card
    emit(
        state,
        "CREATURE_SUMMONED",
        player=action.player,
        pos=action.position,
        card_id=card.id,
        name=card.name,
        cost=card.cost,
    )

    fire(Trigger.ON_SUMMON, AbilityContext(state, action.player, action.position, card))
    promote_back_to_front(state, action.player, announce=False)
    return None


def _swap(state: MatchState, action: SwapAction) -> StepResult | None:
    if not is_position(action.position) or row_of(action.position) != Row.BACK:
        return _reject(state, action, "invalid_position", "Only a back-row creature can swap forward.")
    board = state.players[action.player].battlefield
    back = board[action.position]
    if back is None:
        return _reject(state, action, "no_creature", "No creature in that slot.")

    front_pos = front_of(column_of(action.position))
    front = board[front_pos]
    board[front_pos] = back
    board[action.position] = front
    emit(
        state,
        "CREATURES_SWAPPED",
        player=action.player,
        back_pos=action.position,
        front_pos=int(front_pos),
        forward_id=back.id,
        forward_name=back.name,
        backward_id=front.id if front is not None else None,
        backward_name=front.name if front is not None else None,
    )
    return None


# --- attack -----------------------------------------------------------------


def position_modifier(state: MatchState, attacker_pos: int) -> int:
    if not state.config.position_damage_modifiers:
        return 0
    if row_of(attacker_pos) == Row.BACK:
        return -state.config.back_row_damage_penalty
    return 0


def projected_damage(state: MatchState, player: int, attacker_pos: int, direct: bool) -> int:
    """Damage an attack from `attacker_pos` would deal, without resolving it."""
    attacker = state.players[player].battlefield[attacker_pos]
    if attacker is None:
        return 0
    ctx = AbilityContext(state, player, attacker_pos, attacker, preview=True)
    damage = max(0, attacker.attack + position_modifier(state, attacker_pos))
    damage += fire(Trigger.ON_ATTACK, ctx)
    if direct:
        damage += fire(Trigger.ON_DIRECT_ATTACK, ctx)
        damage -= guard_reduction(state, state.opponent(player))
    return max(0, damage)


def _validate_attack(state: MatchState, action: AttackAction) -> StepResult | None:
    ps = state.players[action.player]
    if not is_position(action.attacker_pos) or ps.battlefield[action.attacker_pos] is None:
        return _reject(state, action, "no_attacker", "No creature to attack with.")
    if not ps.can_attack_this_turn:
        return _reject(state, action, "cannot_attack_this_turn", "Cannot attack this turn.")
    if ps.action_points < 1:
        return _reject(state, action, "insufficient_action_points", "Not enough action points.")

    eps = state.players[state.opponent(action.player)]
    if action.target_pos is None:
        if blocker_for(eps, action.attacker_pos) is not None:
            return _reject(state, action, "invalid_target", "A creature blocks the direct attack.")
        return None
    if not is_position(action.target_pos) or not is_valid_attack_target(action.attacker_pos, action.target_pos):
        return _reject(
            state,
            action,
            "invalid_target",
            "Only the front-row creature in the same column can be attacked.",
        )
    if eps.battlefield[action.target_pos] is None:
        return _reject(state, action, "no_target", "No creature to attack there.")
    return None


def _attacker_standing(ps: PlayerState, pos: int, attacker: CardInstance) -> bool:
    return ps.battlefield[pos] is attacker and attacker.alive


def _resolve_creature_attack(
    state: MatchState, player: int, attacker_pos: int, attacker: CardInstance, target_pos: int, damage: int
) -> None:
    enemy = state.opponent(player)
    ps = state.players[player]
    eps = state.players[enemy]
    target = eps.battlefield[target_pos]
    assert target is not None

    damage_creature(state, enemy, target_pos, damage, source=player)

    front_vs_front = row_of(attacker_pos) == Row.FRONT and row_of(target_pos) == Row.FRONT
    if (
        state.config.counter_attack
        and front_vs_front
        and target.alive
        and _attacker_standing(ps, attacker_pos, attacker)
    ):
        emit(
            state,
            "COUNTER_ATTACK",
            player=enemy,
            pos=target_pos,
            card_id=target.id,
            name=target.name,
            amount=target.attack,
        )
        damage_creature(state, player, attacker_pos, target.attack, source=enemy)
        destroy_if_dead(state, player, attacker_pos, destroyer=enemy)

    if target.alive:
        return
    fire(
        Trigger.ON_DEATH,
        AbilityContext(
            state,
            enemy,
            target_pos,
            target,
            other_player=player,
            other_pos=attacker_pos,
            other_card=attacker,
        ),
    )
    if eps.battlefield[target_pos] is target:
        destroy_creature(state, enemy, target_pos, destroyer=player)


def _resolve_direct_attack(
    state: MatchState, player: int, attacker_pos: int, attacker: CardInstance, damage: int
) -> None:
    enemy = state.opponent(player)
    damage += fire(Trigger.ON_DIRECT_ATTACK, AbilityContext(state, player, attacker_pos, attacker))
    reduction = guard_reduction(state, enemy)
    if reduction > 0:
        emit(state, "DAMAGE_REDUCED", player=enemy, amount=reduction)
        damage = max(0, damage - reduction)
    damage_player(state, enemy, damage, source=player, reason="attack")
    gain_gems(state, reward_recipient(state, enemy), state.config.gem_reward, reason="direct_attack")


def _attack(state: MatchState, action: AttackAction) -> StepResult | None:
    rejected = _validate_attack(state, action)
    if rejected is not None:
        return rejected

    player = action.player
    ps = state.players[player]
    attacker = ps.battlefield[action.attacker_pos]
    assert attacker is not None

    ps.action_points -= 1
    emit(
        state,
        "ATTACK_DECLARED",
        player=player,
        pos=action.attacker_pos,
        card_id=attacker.id,
        name=attacker.name,
        target_player=state.opponent(player),
        target_pos=action.target_pos,
    )

    damage = max(0, attacker.attack + position_modifier(state, action.attacker_pos))
    # Berserk can destroy the attacker here; its blow still lands.
    damage += fire(Trigger.ON_ATTACK, AbilityContext(state, player, action.attacker_pos, attacker))

    if action.target_pos is None:
        _resolve_direct_attack(state, player, action.attacker_pos, attacker, damage)
    else:
        _resolve_creature_attack(state, player, action.attacker_pos, attacker, action.target_pos, damage)

    check_winner(state)
    return None


# --- entry points -------------------------------------------------------------


def step(state: MatchState, action: Action) -> StepResult:
    """Apply a single action to the match state.

    This mutates `state` in-place but remains deterministic for a given
    (seed, config, action sequence). Rejected actions leave the state unchanged
    apart from an ACTION_REJECTED event.
    """
    start = len(state.event_log)
    if state.game_over:
        return _reject(state, action, "game_over", "Match already ended.")

    # Log first, so replay has a full record of attempted actions
    state.action_log.append(action)

    if action.player != state.current_player:
        return _reject(state, action, "not_your_turn", "Not your turn.")

    if isinstance(action, SummonAction):
        rejected = _summon(state, action)
    elif isinstance(action, AttackAction):
        rejected = _attack(state, action)
    elif isinstance(action, SwapAction):
        rejected = _swap(state, action)
    elif isinstance(action, EndTurnAction):
        rejected = _end_turn(state, action)
    else:
        rejected = _reject(state, action, "unknown_action", "Unknown action.")

    if rejected is not None:
        return rejected
    return StepResult(ok=True, events=state.event_log[start:])


def legal_attacks(state: MatchState, player: int) -> list[AttackAction]:
    """Every attack the resolver would currently accept for `player`."""
    ps = state.players[player]
    if state.game_over or not ps.can_attack_this_turn or ps.action_points < 1:
        return []
    eps = state.players[state.opponent(player)]
    attacks: list[AttackAction] = []
    for pos, _ in ps.creatures():
        front = front_of(column_of(pos))
        target = int(front) if eps.battlefield[front] is not None else None
        attacks.append(AttackAction(player=player, attacker_pos=pos, target_pos=target))
    return attacks


def new_match(
    catalog: CardCatalog,
    seed: int,
    config: MatchConfig | None = None,
    first_player: int | None = None,
    decks: Mapping[int, Sequence[str]] | None = None,
    listeners: Iterable[EventListener] = (),
) -> MatchState:
    cfg = config or MatchConfig()
    if cfg.starting_hand > cfg.hand_limit:
        raise ValueError("Starting hand cannot exceed the hand limit.")
    if first_player is not None and first_player not in PLAYERS:
        raise ValueError(f"First player must be one of {PLAYERS}.")

    rng = random.Random(seed)
    players: dict[int, PlayerState] = {}
    for p in PLAYERS:
        if decks is not None and p in decks:
            template_ids = list(decks[p])
            if len(template_ids) != cfg.deck_size:
                raise ValueError(f"Decks must be exactly {cfg.deck_size} cards.")
            deck = [
                CardInstance.from_template(catalog.get(tid), f"{p}-{i}") for i, tid in enumerate(template_ids)
            ]
            rng.shuffle(deck)
        else:
            deck = build_deck(catalog, p, cfg.deck_size, rng)
        players[p] = PlayerState(life=cfg.starting_life, deck=deck)

    state = MatchState(
        catalog=catalog,
        config=cfg,
        seed=seed,
        rng=rng,
        players=players,
        ai_rng=random.Random(rng.getrandbits(64)),
        listeners=list(listeners),
    )
    state.current_player = first_player if first_player is not None else rng.choice(PLAYERS)

    for _ in range(cfg.starting_hand):
        for p in PLAYERS:
            draw_card(state, p)

    emit(state, "MATCH_STARTED", first_player=state.current_player, seed=seed)
    # The opening player skips the draw on their first turn.
    start_turn(state, state.current_player, skip_draw=True)
    return state


def replay(
    catalog: CardCatalog,
    seed: int,
    actions: Iterable[Action],
    config: MatchConfig | None = None,
    first_player: int | None = None,
    decks: Mapping[int, Sequence[str]] | None = None,
) -> MatchState:
    state = new_match(catalog, seed, config=config, first_player=first_player, decks=decks)
    for a in actions:
        step(state, a)
        if state.game_over:
            break
    return state
