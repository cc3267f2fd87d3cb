"""Deterministic, headless rules engine for CardJam.

IMPORTANT: This package must never do I/O; presentation lives elsewhere.
"""

from .actions import AttackAction, EndTurnAction, SummonAction, SwapAction
from .ai import AISpec, ai_take_turn, choose_action, iter_turn
from .match import legal_attacks, new_match, replay, step
from .state import MatchConfig, MatchState, StepResult
from .types import AbilityKind, CardCatalog, CardTemplate, Position, Row, Trigger

__all__ = [
    "AISpec",
    "AbilityKind",
    "AttackAction",
    "CardCatalog",
    "CardTemplate",
    "EndTurnAction",
    "MatchConfig",
    "MatchState",
    "Position",
    "Row",
    "StepResult",
    "SummonAction",
    "SwapAction",
    "Trigger",
    "ai_take_turn",
    "choose_action",
    "iter_turn",
    "legal_attacks",
    "new_match",
    "replay",
    "step",
]
