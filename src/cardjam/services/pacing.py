"""Turn pacing for interactive play.

The engine decides; this module decides *when*. `TimerQueue` is a virtual
clock with cancellable one-shot timers, and `MatchDriver` uses it to schedule
computer actions one at a time and to end a human turn automatically once the
player is out of action points.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Iterable, Iterator, Mapping

from cardjam.engine.actions import Action, AttackAction, EndTurnAction, SummonAction, SwapAction
from cardjam.engine.ai import AISpec, iter_turn
from cardjam.engine.match import step
from cardjam.engine.state import MatchState, StepResult

logger = logging.getLogger(__name__)


@dataclass
class TimerHandle:
    when: float
    seq: int
    callback: Callable[[], None]
    cancelled: bool = False

    def cancel(self) -> None:
        self.cancelled = True


class TimerQueue:
    def __init__(self) -> None:
        self.now = 0.0
        self._seq = 0
        self._timers: list[TimerHandle] = []

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        if delay < 0:
            raise ValueError("delay must be >= 0")
        handle = TimerHandle(when=self.now + delay, seq=self._seq, callback=callback)
        self._seq += 1
        self._timers.append(handle)
        return handle

    def pending(self) -> list[TimerHandle]:
        return [t for t in self._timers if not t.cancelled]

    def next_deadline(self) -> float | None:
        pending = self.pending()
        if not pending:
            return None
        return min(t.when for t in pending)

    def cancel_all(self) -> None:
        for t in self._timers:
            t.cancel()
        self._timers.clear()

    def advance(self, seconds: float) -> int:
        """Move the clock forward, firing due timers in order. Returns how many fired."""
        target = self.now + seconds
        fired = 0
        while True:
            due = [t for t in self._timers if not t.cancelled and t.when <= target]
            if not due:
                break
            timer = min(due, key=lambda t: (t.when, t.seq))
            self._timers.remove(timer)
            self.now = timer.when
            timer.callback()
            fired += 1
        self.now = target
        self._timers = [t for t in self._timers if not t.cancelled]
        return fired


class MatchDriver:
    def __init__(
        self,
        state: MatchState,
        timers: TimerQueue | None = None,
        computer_players: Iterable[int] = (2,),
        ai_specs: Mapping[int, AISpec] | None = None,
        action_delay: float = 0.6,
        auto_end_delay: float = 1.0,
        opening_delay: float = 1.5,
        max_turns: int | None = None,
    ) -> None:
        self.state = state
        self.timers = timers or TimerQueue()
        self.computer_players = frozenset(computer_players)
        self._ai_specs = dict(ai_specs or {})
        self.action_delay = action_delay
        self.auto_end_delay = auto_end_delay
        self.opening_delay = opening_delay
        self.max_turns = max_turns
        self.stalled = False
        self._ai_turn: Iterator[tuple[Action, StepResult]] | None = None
        self._computer_timer: TimerHandle | None = None
        self._auto_end_timer: TimerHandle | None = None

    def is_computer(self, player: int) -> bool:
        return player in self.computer_players

    def start(self) -> None:
        if self.is_computer(self.state.current_player):
            self._schedule_computer_step(self.opening_delay)

    # --- human entry points ---

    def summon(self, hand_index: int, position: int) -> StepResult:
        return self._human(SummonAction(self.state.current_player, hand_index, position))

    def attack(self, attacker_pos: int, target_pos: int | None = None) -> StepResult:
        return self._human(AttackAction(self.state.current_player, attacker_pos, target_pos))

    def swap(self, position: int) -> StepResult:
        return self._human(SwapAction(self.state.current_player, position))

    def end_turn(self) -> StepResult:
        return self._human(EndTurnAction(self.state.current_player))

    def _human(self, action: Action) -> StepResult:
        if self.is_computer(action.player):
            return StepResult(ok=False, events=[], error="It is the computer's turn.")
        if isinstance(action, EndTurnAction):
            self._cancel_auto_end()
        result = step(self.state, action)
        self._after_step()
        if (
            result.ok
            and not self.state.game_over
            and not self.stalled
            and self.state.current_player == action.player
            and self.state.players[action.player].action_points <= 0
        ):
            self._schedule_auto_end(action.player)
        return result

    # --- timers ---

    def _schedule_auto_end(self, player: int) -> None:
        # A new auto-end replaces a pending one.
        self._cancel_auto_end()
        self._auto_end_timer = self.timers.call_later(self.auto_end_delay, lambda: self._auto_end(player))

    def _cancel_auto_end(self) -> None:
        if self._auto_end_timer is not None:
            self._auto_end_timer.cancel()
            self._auto_end_timer = None

    def _auto_end(self, player: int) -> None:
        self._auto_end_timer = None
        if self.state.game_over or self.state.current_player != player:
            return
        step(self.state, EndTurnAction(player=player))
        self._after_step()

    def _schedule_computer_step(self, delay: float) -> None:
        if self._computer_timer is not None:
            self._computer_timer.cancel()
        self._computer_timer = self.timers.call_later(delay, self._computer_step)

    def _computer_step(self) -> None:
        self._computer_timer = None
        if self.state.game_over:
            return
        player = self.state.current_player
        if self._ai_turn is None:
            self._ai_turn = iter_turn(self.state, player, self._ai_specs.get(player))
        try:
            action, _ = next(self._ai_turn)
        except StopIteration:
            self._ai_turn = None
            return
        if isinstance(action, EndTurnAction) or self.state.game_over:
            self._ai_turn = None
        self._after_step()
        if self._ai_turn is not None:
            self._schedule_computer_step(self.action_delay)

    def _stop(self) -> None:
        self._ai_turn = None
        self._computer_timer = None
        self._auto_end_timer = None
        self.timers.cancel_all()

    def _after_step(self) -> None:
        if self.max_turns is not None and self.state.turn_number > self.max_turns and not self.state.game_over:
            logger.info("Stopping after %d turns without a winner", self.max_turns)
            self.stalled = True
            self._stop()
            return
        if self.state.game_over:
            if self.timers.pending():
                logger.debug("Game over; cancelling %d pending timer(s)", len(self.timers.pending()))
            self._stop()
            return
        if (
            self.is_computer(self.state.current_player)
            and self._ai_turn is None
            and self._computer_timer is None
        ):
            self._schedule_computer_step(self.action_delay)

    def run(self, sleep: Callable[[float], None] = time.sleep) -> None:
        """Drive pending timers in real time until nothing is scheduled."""
        while (deadline := self.timers.next_deadline()) is not None:
            wait = max(0.0, deadline - self.timers.now)
            if wait > 0:
                sleep(wait)
            self.timers.advance(wait)
