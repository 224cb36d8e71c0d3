"""
Single-writer table: owns the current round snapshot and drives bot seats.

Automated seats do not act inline. When a bot gets the turn, a ``BotTurn`` is
scheduled on an ``ActionQueue`` after ``config.bot_delay`` seconds. When it
fires it checks that the round is still at the turn it was scheduled for; if
anything moved on in between (a human acted, a new round was dealt) it does
nothing. All actions run on the thread calling ``run_pending`` /
``run_until_idle``; there are no locks.
"""
from __future__ import annotations

import heapq
import itertools
import logging
import random
import time
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence

from .agents import PlaceholderBot, SeatPolicy
from .config import DEFAULT_CONFIG, RulesConfig
from .deck import Card, Suit
from .game import (
    Phase,
    RoundState,
    is_bot_turn,
    legal_cards,
    new_round,
    pass_bid,
    place_bid,
    play_card,
    select_trump,
)

logger = logging.getLogger(__name__)

Listener = Callable[[RoundState], None]


class ManualClock:
    """Clock that only moves when told to. Lets tests and the CLI skip bot delays."""

    def __init__(self, start: float = 0.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class ActionQueue:
    """Deferred actions ordered by due time (FIFO among equal times)."""

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self.clock = clock
        self._heap: list[tuple[float, int, Callable[[], None]]] = []
        self._seq = itertools.count()

    def schedule(self, action: Callable[[], None], delay: float = 0.0) -> float:
        """Queue ``action`` to run ``delay`` seconds from now; returns its due time."""
        due = self.clock() + delay
        heapq.heappush(self._heap, (due, next(self._seq), action))
        return due

    def next_due(self) -> Optional[float]:
        return self._heap[0][0] if self._heap else None

    def due(self) -> bool:
        return bool(self._heap) and self._heap[0][0] <= self.clock()

    def run_pending(self) -> int:
        """Run every action that is due, in order. Returns how many ran."""
        ran = 0
        while self.due():
            _, _, action = heapq.heappop(self._heap)
            action()
            ran += 1
        return ran

    def clear(self) -> None:
        self._heap.clear()

    def __len__(self) -> int:
        return len(self._heap)


def turn_key(state: RoundState) -> tuple:
    """Identifies one decision point: the same key means nothing has happened since."""
    return (
        state.phase,
        state.current_seat,
        len(state.tricks),
        len(state.current_trick),
        state.bids,
    )


@dataclass
class BotTurn:
    """A bot decision scheduled for the turn described by ``key``."""

    table: "Table"
    key: tuple

    def __call__(self) -> None:
        self.table._run_bot_turn(self)


class Table:
    """
    Holds the live ``RoundState`` and applies one action at a time.

    Presentation code reads ``table.state`` (or subscribes for every new
    snapshot) and calls the four action methods for the human seat. Passing
    ``seat=`` makes the table refuse the action unless it is that seat's turn.
    """

    def __init__(
        self,
        state: RoundState | None = None,
        config: RulesConfig = DEFAULT_CONFIG,
        policies: Dict[int, SeatPolicy] | None = None,
        queue: ActionQueue | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.config = config
        self.queue = queue if queue is not None else ActionQueue()
        self.rng = rng or random.Random()
        self._listeners: List[Listener] = []
        self._state = state if state is not None else new_round(config=config, rng=self.rng)
        self.policies: Dict[int, SeatPolicy] = dict(policies or {})
        self._fill_default_policies()
        self._schedule_bot_turn()

    # ---- Public API ----

    @property
    def state(self) -> RoundState:
        return self._state

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call ``listener(state)`` after every accepted action. Returns an unsubscribe function."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def start_round(
        self,
        seat_names: Sequence[str] | None = None,
        automated: Sequence[bool] | None = None,
    ) -> RoundState:
        """Throw away the current round (and any pending bot turns) and deal a new one."""
        self.queue.clear()
        if seat_names is None:
            seat_names = [s.name for s in self._state.seats]
        if automated is None:
            automated = [s.is_bot for s in self._state.seats]
        self._state = new_round(seat_names, automated, config=self.config, rng=self.rng)
        self._fill_default_policies()
        self._notify()
        self._schedule_bot_turn()
        return self._state

    def place_bid(self, value: int, seat: int | None = None) -> RoundState:
        return self._apply(lambda s: place_bid(s, value, self.config), seat, "bid")

    def pass_bid(self, seat: int | None = None) -> RoundState:
        return self._apply(lambda s: pass_bid(s, self.config), seat, "pass")

    def select_trump(self, suit: Suit, seat: int | None = None) -> RoundState:
        return self._apply(lambda s: select_trump(s, suit), seat, "trump")

    def play_card(self, card: Card, seat: int | None = None) -> RoundState:
        return self._apply(lambda s: play_card(s, card), seat, "card")

    def run_until_idle(self, max_steps: int = 10_000) -> RoundState:
        """
        Run queued bot turns until none are left (or a human must act).
        A ``ManualClock`` is advanced straight to the next due time; a real
        clock is waited on.
        """
        steps = 0
        while len(self.queue) and steps < max_steps:
            next_due = self.queue.next_due()
            assert next_due is not None
            wait = next_due - self.queue.clock()
            if wait > 0:
                if isinstance(self.queue.clock, ManualClock):
                    self.queue.clock.advance(wait)
                else:
                    time.sleep(wait)
            steps += self.queue.run_pending()
        return self._state

    # ---- Internal helpers ----

    def _fill_default_policies(self) -> None:
        for i, seat in enumerate(self._state.seats):
            if seat.is_bot and i not in self.policies:
                self.policies[i] = PlaceholderBot(seed=self.rng.randrange(2**32))

    def _apply(
        self,
        transition: Callable[[RoundState], RoundState],
        seat: int | None,
        kind: str,
    ) -> RoundState:
        before = self._state
        if seat is not None and seat != before.current_seat:
            logger.debug("Rejected %s from seat %s: seat %s to act", kind, seat, before.current_seat)
            return before
        after = transition(before)
        if after is before:
            return before
        self._state = after
        self._notify()
        self._schedule_bot_turn()
        return after

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self._state)

    def _schedule_bot_turn(self) -> None:
        if is_bot_turn(self._state):
            self.queue.schedule(BotTurn(self, turn_key(self._state)), self.config.bot_delay)

    def _run_bot_turn(self, turn: BotTurn) -> None:
        state = self._state
        if turn_key(state) != turn.key:
            logger.debug("Dropped stale bot turn %s", turn.key[:2])
            return
        seat = state.current_seat
        policy = self.policies.get(seat)
        if policy is None:
            logger.warning("No policy for automated seat %s; passing the turn over", seat)
            return
        if state.phase == Phase.BIDDING:
            value = policy.choose_bid(state, seat, self.config)
            if self.place_bid(value, seat=seat) is state:
                logger.warning("Seat %s policy bid %s was refused; passing instead", seat, value)
                self.pass_bid(seat=seat)
        elif state.phase == Phase.PLAYING:
            card = policy.choose_card(state, seat)
            if self.play_card(card, seat=seat) is state:
                fallback = legal_cards(state)[0]
                logger.warning(
                    "Seat %s policy chose illegal card %s; playing %s instead", seat, card, fallback
                )
                self.play_card(fallback, seat=seat)

