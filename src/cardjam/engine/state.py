from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Callable, Literal

from .actions import Action
from .types import AbilityKind, CardCatalog, CardTemplate

Event = dict[str, object]
EventListener = Callable[[Event], None]

DeckOutPolicy = Literal["none", "penalty_damage"]
DiscardPolicy = Literal["oldest", "random"]
GemRewardPolicy = Literal["aggressor", "victim"]

PLAYERS: tuple[int, int] = (1, 2)


@dataclass(frozen=True)
class MatchConfig:
    starting_life: int = 20
    starting_hand: int = 3
    deck_size: int = 15
    hand_limit: int = 4
    max_action_points: int = 2
    first_turn_gems: int = 2
    turn_gems: int = 1
    gem_reward: int = 1
    counter_attack: bool = True
    abilities: bool = True
    position_damage_modifiers: bool = False
    back_row_damage_penalty: int = 1
    deck_out_policy: DeckOutPolicy = "none"
    deck_out_penalty: int = 10
    discard_policy: DiscardPolicy = "oldest"
    gem_reward_policy: GemRewardPolicy = "aggressor"


@dataclass
class CardInstance:
    id: str
    template_id: str
    name: str
    hp: int
    max_hp: int
    attack: int
    cost: int
    ability: AbilityKind | None = None

    @staticmethod
    def from_template(template: CardTemplate, instance_id: str) -> "CardInstance":
        return CardInstance(
            id=instance_id,
            template_id=template.id,
            name=template.name,
            hp=template.hp,
            max_hp=template.hp,
            attack=template.attack,
            cost=template.cost,
            ability=template.ability,
        )

    @property
    def alive(self) -> bool:
        return self.hp > 0

    def has(self, ability: AbilityKind) -> bool:
        return self.ability == ability


@dataclass
class PlayerStats:
    damage_dealt: int = 0
    damage_taken: int = 0
    creatures_summoned: int = 0
    creatures_destroyed: int = 0
    gems_spent: int = 0


@dataclass
class PlayerState:
    life: int
    gems: int = 0
    action_points: int = 0
    hand: list[CardInstance] = field(default_factory=list)
    deck: list[CardInstance] = field(default_factory=list)
    battlefield: list[CardInstance | None] = field(default_factory=lambda: [None, None, None, None])
    discard: list[CardInstance] = field(default_factory=list)
    first_turn_completed: bool = False
    can_attack_this_turn: bool = False
    stats: PlayerStats = field(default_factory=PlayerStats)

    def creatures(self) -> list[tuple[int, CardInstance]]:
        return [(pos, c) for pos, c in enumerate(self.battlefield) if c is not None]


@dataclass
class StepResult:
    ok: bool
    events: list[Event]
    error: str | None = None


@dataclass
class MatchState:
    catalog: CardCatalog
    config: MatchConfig
    seed: int
    rng: random.Random
    players: dict[int, PlayerState]
    # Decision-making randomness; kept apart so replays only depend on `rng`.
    ai_rng: random.Random = field(default_factory=random.Random)
    current_player: int = 1
    turn_number: int = 1
    winner: int | None = None
    action_log: list[Action] = field(default_factory=list)
    event_log: list[Event] = field(default_factory=list)
    listeners: list[EventListener] = field(default_factory=list)

    @property
    def game_over(self) -> bool:
        return self.winner is not None

    def opponent(self, player: int) -> int:
        return 2 if player == 1 else 1

    def player(self, player: int) -> PlayerState:
        return self.players[player]


def emit(state: MatchState, event_type: str, **payload: object) -> Event:
    """Record a structured event and forward it to every listener."""
    event: Event = {"type": event_type, **payload}
    state.event_log.append(event)
    for listener in state.listeners:
        listener(event)
    return event
