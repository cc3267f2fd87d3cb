from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Literal

PlayerId = Literal[1, 2]


class Position(IntEnum):
    FRONT_LEFT = 0
    FRONT_RIGHT = 1
    BACK_LEFT = 2
    BACK_RIGHT = 3


class Row(IntEnum):
    FRONT = 0
    BACK = 1


class AbilityKind(str, Enum):
    GREED = "greed"
    POISON = "poison"
    BERSERK = "berserk"
    CURSE = "curse"
    REGENERATE = "regenerate"
    GUARD = "guard"
    MAGIC = "magic"
    MIGHTY = "mighty"


class Trigger(str, Enum):
    ON_SUMMON = "on_summon"
    ON_ATTACK = "on_attack"
    ON_DEATH = "on_death"
    ON_TURN_START = "on_turn_start"
    ON_DIRECT_ATTACK = "on_direct_attack"
    PASSIVE_GUARD = "passive_guard"


# Each ability fires at exactly one timing.
ABILITY_TIMING: dict[AbilityKind, Trigger] = {
    AbilityKind.GREED: Trigger.ON_SUMMON,
    AbilityKind.MAGIC: Trigger.ON_SUMMON,
    AbilityKind.BERSERK: Trigger.ON_ATTACK,
    AbilityKind.POISON: Trigger.ON_DEATH,
    AbilityKind.CURSE: Trigger.ON_DEATH,
    AbilityKind.REGENERATE: Trigger.ON_TURN_START,
    AbilityKind.MIGHTY: Trigger.ON_DIRECT_ATTACK,
    AbilityKind.GUARD: Trigger.PASSIVE_GUARD,
}


@dataclass(frozen=True)
class CardTemplate:
    id: str
    name: str
    hp: int
    attack: int
    cost: int
    ability: AbilityKind | None = None
    ability_text: str | None = None

    @property
    def timing(self) -> Trigger | None:
        if self.ability is None:
            return None
        return ABILITY_TIMING[self.ability]


@dataclass(frozen=True)
class CardCatalog:
    """Immutable set of card templates used by the engine."""

    cards: dict[str, CardTemplate]

    def get(self, template_id: str) -> CardTemplate:
        return self.cards[template_id]

    def templates(self) -> Sequence[CardTemplate]:
        return list(self.cards.values())
