from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Literal

from .actions import Action, AttackAction, EndTurnAction, SummonAction, SwapAction
from .board import BACK_POSITIONS, column_of, front_of, open_positions, row_of
from .match import legal_attacks, projected_damage, step
from .state import CardInstance, MatchState, StepResult
from .types import Row

Difficulty = Literal["easy", "normal", "hard"]


@dataclass(frozen=True)
class AISpec:
    """AI tuning parameters.

    difficulty:
      easy   = random summons and random non-lethal attacks
      normal = scored summons and attacks
      hard   = ability-aware summons, attacks weighted toward dangerous targets
    """

    difficulty: Difficulty = "normal"
    ability_bonus: int = 2
    threat_weight: float = 1.5


@dataclass(frozen=True)
class AttackChoice:
    action: AttackAction
    attacker_attack: int
    damage: int
    lethal: bool
    will_kill: bool
    target_hp: int
    target_attack: int


def card_score(card: CardInstance) -> int:
    return card.attack * 3 + card.hp * 2 - card.cost


def attack_choices(state: MatchState, player: int) -> list[AttackChoice]:
    """Scored attacks for every front-row creature of `player`."""
    ps = state.players[player]
    eps = state.players[state.opponent(player)]
    choices: list[AttackChoice] = []
    for action in legal_attacks(state, player):
        if row_of(action.attacker_pos) != Row.FRONT:
            continue
        attacker = ps.battlefield[action.attacker_pos]
        assert attacker is not None
        damage = projected_damage(state, player, action.attacker_pos, direct=action.is_direct)
        if action.target_pos is None:
            choices.append(
                AttackChoice(
                    action=action,
                    attacker_attack=attacker.attack,
                    damage=damage,
                    lethal=damage >= eps.life,
                    will_kill=False,
                    target_hp=eps.life,
                    target_attack=0,
                )
            )
            continue
        target = eps.battlefield[action.target_pos]
        assert target is not None
        choices.append(
            AttackChoice(
                action=action,
                attacker_attack=attacker.attack,
                damage=damage,
                lethal=False,
                will_kill=damage >= target.hp,
                target_hp=target.hp,
                target_attack=target.attack,
            )
        )
    return choices


def _attack_key(choice: AttackChoice, spec: AISpec) -> tuple[bool, bool, float, int, int, int]:
    threat: float = choice.target_attack
    if spec.difficulty == "hard":
        threat = spec.threat_weight * choice.target_attack
    return (
        choice.lethal,
        choice.will_kill,
        threat,
        choice.damage,
        -choice.target_hp,
        choice.attacker_attack,
    )


def pick_lethal(state: MatchState, player: int, spec: AISpec) -> AttackAction | None:
    lethal = [c for c in attack_choices(state, player) if c.lethal]
    if not lethal:
        return None
    return max(lethal, key=lambda c: _attack_key(c, spec)).action


def pick_attack(state: MatchState, player: int, spec: AISpec) -> AttackAction | None:
    choices = attack_choices(state, player)
    if not choices:
        return None
    if spec.difficulty == "easy":
        return state.ai_rng.choice(choices).action
    return max(choices, key=lambda c: _attack_key(c, spec)).action


def pick_summon(state: MatchState, player: int, spec: AISpec) -> SummonAction | None:
    ps = state.players[player]
    if ps.action_points < 1:
        return None
    positions = open_positions(ps)
    if not positions:
        return None
    affordable = [(i, c) for i, c in enumerate(ps.hand) if c.cost <= ps.gems]
    if not affordable:
        return None

    if spec.difficulty == "easy":
        index, _ = state.ai_rng.choice(affordable)
    else:

        def key(item: tuple[int, CardInstance]) -> tuple[int, int, int]:
            card = item[1]
            score = card_score(card)
            if spec.difficulty == "hard" and card.ability is not None:
                score += spec.ability_bonus
            return (score, card.attack, card.hp)

        # max() keeps the earliest card on ties, like a stable sort would.
        index, _ = max(affordable, key=key)

    return SummonAction(player=player, hand_index=index, position=state.ai_rng.choice(positions))


def pick_swap(state: MatchState, player: int) -> SwapAction | None:
    board = state.players[player].battlefield
    for back_pos in BACK_POSITIONS:
        back = board[back_pos]
        if back is None:
            continue
        front = board[front_of(column_of(back_pos))]
        if front is None or front.attack < back.attack:
            return SwapAction(player=player, position=int(back_pos))
    return None


def _can_spare_action_point(state: MatchState, player: int) -> bool:
    # Keep one action point for an attack when there is something to attack with.
    ps = state.players[player]
    has_attackers = ps.can_attack_this_turn and any(c is not None for c in ps.battlefield)
    return ps.action_points > 1 or not has_attackers


def choose_action(state: MatchState, player: int, spec: AISpec | None = None) -> Action | None:
    """Pick the next action for `player`, or None when the turn should end."""
    spec = spec or AISpec()
    if state.game_over or state.current_player != player:
        return None
    if state.players[player].action_points < 1:
        return None

    lethal = pick_lethal(state, player, spec)
    if lethal is not None:
        return lethal
    if _can_spare_action_point(state, player):
        summon = pick_summon(state, player, spec)
        if summon is not None:
            return summon
    swap = pick_swap(state, player)
    if swap is not None:
        return swap
    return pick_attack(state, player, spec)


def iter_turn(
    state: MatchState, player: int, spec: AISpec | None = None
) -> Iterator[tuple[Action, StepResult]]:
    """Play `player`'s turn one action at a time.

    Yields after every applied action so a caller can pace the turn; the last
    item is the EndTurnAction unless the match ended first.
    """
    spec = spec or AISpec()
    while not state.game_over and state.current_player == player:
        action = choose_action(state, player, spec)
        if action is None:
            break
        result = step(state, action)
        yield action, result
        if not result.ok:
            break
    if not state.game_over and state.current_player == player:
        end = EndTurnAction(player=player)
        yield end, step(state, end)


def ai_take_turn(state: MatchState, player: int, spec: AISpec | None = None) -> None:
    """Advance the match through the AI player's turn.

    The AI uses `state.ai_rng`, so it remains deterministic for a given seed.
    """
    for _ in iter_turn(state, player, spec):
        pass
