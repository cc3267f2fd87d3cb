from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class SummonAction:
    player: int
    hand_index: int
    position: int


@dataclass(frozen=True)
class AttackAction:
    """Attack with the creature at `attacker_pos`.

    `target_pos=None` is a direct attack on the opposing player.
    """

    player: int
    attacker_pos: int
    target_pos: int | None = None

    @property
    def is_direct(self) -> bool:
        return self.target_pos is None


@dataclass(frozen=True)
class SwapAction:
    player: int
    position: int


@dataclass(frozen=True)
class EndTurnAction:
    player: int


Action = SummonAction | AttackAction | SwapAction | EndTurnAction
