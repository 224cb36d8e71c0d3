"""
Observation / action encoding and a single-seat environment for 220.

Observations are flat ``float32`` numpy vectors built from a ``RoundState``:

- 32 card bits: the observing seat's hand
- 32 card bits: cards in the trick being played
- 32 card bits: cards in completed tricks
- 5: trump one-hot (4 suits + none)
- 5: phase one-hot
- 4: observing seat one-hot
- 5: bid winner one-hot (4 seats + none)
- 1: current bid / max bid
- 8: per seat (bid / max bid, passed flag)
- 4: per seat score / 220

Actions live in one global index space: ``[PASS, bid levels..., 4 trump
suits, 32 cards]``. ``ActionSpace`` maps between indices and moves.
"""
from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Dict, Iterable, Optional

import numpy as np

from .agents import PlaceholderBot, SeatPolicy
from .bidding import PASS, PASSED, is_valid_bid
from .config import DEFAULT_CONFIG, RulesConfig
from .deck import RANK_ORDER, Card, Rank, Suit
from .game import (
    Phase,
    RoundState,
    legal_cards,
    new_round,
    place_bid,
    play_card,
    select_trump,
)

NUM_CARDS: int = 32
NUM_SUITS: int = 4
TOTAL_POINTS: int = 220
OBS_SIZE: int = 3 * NUM_CARDS + 5 + 5 + 4 + 5 + 1 + 8 + 4  # 128

PHASES: tuple[Phase, ...] = tuple(Phase)
SUITS: tuple[Suit, ...] = tuple(Suit)


def card_index(card: Card) -> int:
    """
    Stable index 0..31 matching ``make_deck_32()``: suit-major in ``Suit``
    order, then A..7 within the suit.
    """
    return SUITS.index(card.suit) * len(RANK_ORDER) + RANK_ORDER.index(card.rank)


def card_from_index(index: int) -> Card:
    suit = SUITS[index // len(RANK_ORDER)]
    rank: Rank = RANK_ORDER[index % len(RANK_ORDER)]
    return Card(suit=suit, rank=rank)


def encode_card_set(cards: Iterable[Card]) -> np.ndarray:
    """Binary 32-dim vector: 1.0 where the card is present."""
    vec = np.zeros(NUM_CARDS, dtype=np.float32)
    for c in cards:
        vec[card_index(c)] = 1.0
    return vec


def _one_hot(index: int | None, size: int) -> np.ndarray:
    vec = np.zeros(size, dtype=np.float32)
    if index is not None and 0 <= index < size:
        vec[index] = 1.0
    return vec


def encode_observation(
    state: RoundState,
    seat: int,
    config: RulesConfig = DEFAULT_CONFIG,
) -> np.ndarray:
    """Flat observation of ``state`` from ``seat``'s point of view (length OBS_SIZE)."""
    played = [c for trick in state.tricks for c in trick]

    bid_info = np.zeros(2 * config.num_seats, dtype=np.float32)
    for i, record in enumerate(state.bids):
        if record == PASSED:
            bid_info[2 * i + 1] = 1.0
        elif record is not None:
            bid_info[2 * i] = float(record) / config.max_bid

    parts = [
        encode_card_set(state.hand(seat)),
        encode_card_set(state.current_trick),
        encode_card_set(played),
        _one_hot(SUITS.index(state.trump) if state.trump is not None else NUM_SUITS, NUM_SUITS + 1),
        _one_hot(PHASES.index(state.phase), len(PHASES)),
        _one_hot(seat, config.num_seats),
        _one_hot(state.bid_winner if state.bid_winner is not None else config.num_seats, config.num_seats + 1),
        np.array([state.current_bid / config.max_bid], dtype=np.float32),
        bid_info,
        np.asarray(state.scores, dtype=np.float32) / TOTAL_POINTS,
    ]
    obs = np.concatenate(parts)
    assert obs.shape == (OBS_SIZE,)
    return obs


@dataclass(frozen=True)
class ActionSpace:
    """Index layout of the global action space for one rules config."""

    bid_levels: tuple[int, ...]

    @classmethod
    def from_config(cls, config: RulesConfig = DEFAULT_CONFIG) -> "ActionSpace":
        return cls(bid_levels=tuple(config.bid_levels()))

    @property
    def num_bid_actions(self) -> int:
        return 1 + len(self.bid_levels)  # PASS + levels

    @property
    def trump_offset(self) -> int:
        return self.num_bid_actions

    @property
    def card_offset(self) -> int:
        return self.trump_offset + NUM_SUITS

    @property
    def size(self) -> int:
        return self.card_offset + NUM_CARDS

    def bid_action(self, value: int) -> int:
        if value == PASS:
            return 0
        return 1 + self.bid_levels.index(value)

    def trump_action(self, suit: Suit) -> int:
        return self.trump_offset + SUITS.index(suit)

    def card_action(self, card: Card) -> int:
        return self.card_offset + card_index(card)

    def legal_mask(self, state: RoundState, config: RulesConfig = DEFAULT_CONFIG) -> np.ndarray:
        """Boolean mask over the action space for the seat to act."""
        mask = np.zeros(self.size, dtype=bool)
        if state.phase == Phase.BIDDING:
            mask[0] = True
            for value in self.bid_levels:
                if is_valid_bid(state.bidding, value, config):
                    mask[self.bid_action(value)] = True
        elif state.phase == Phase.SELECTING_TRUMP:
            mask[self.trump_offset:self.card_offset] = True
        elif state.phase == Phase.PLAYING:
            for card in legal_cards(state):
                mask[self.card_action(card)] = True
        return mask

    def apply(self, state: RoundState, action: int, config: RulesConfig = DEFAULT_CONFIG) -> RoundState:
        """Apply action ``action`` for the seat to act (engine rules still apply)."""
        if not 0 <= action < self.size:
            raise ValueError(f"Action {action} outside [0, {self.size})")
        if action < self.num_bid_actions:
            value = PASS if action == 0 else self.bid_levels[action - 1]
            return place_bid(state, value, config)
        if action < self.card_offset:
            return select_trump(state, SUITS[action - self.trump_offset])
        return play_card(state, card_from_index(action - self.card_offset))


@dataclass
class StepResult:
    """Container returned by TwoTwentyEnv.step/reset for clarity."""

    obs: np.ndarray
    reward: float
    done: bool
    info: dict
    legal_actions_mask: np.ndarray


@dataclass
class TwoTwentyEnv:
    """
    One round of 220 seen from a single learning seat.

    Public API (minimal, Gym-like but without external dependency):
      - reset() -> StepResult          # deal, first decision for learning seat
      - step(action: int) -> StepResult

    The other seats are driven by ``opponents`` (``PlaceholderBot`` by
    default). Reward is the learning seat's card points, paid once at the end.
    """

    learning_seat: int = 0
    rng: Optional[random.Random] = None
    config: RulesConfig = DEFAULT_CONFIG
    opponents: Dict[int, SeatPolicy] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not 0 <= self.learning_seat < self.config.num_seats:
            raise ValueError(f"learning_seat must be in [0, {self.config.num_seats})")
        self.rng = self.rng or random.Random()
        self.actions = ActionSpace.from_config(self.config)
        for seat in range(self.config.num_seats):
            if seat != self.learning_seat and seat not in self.opponents:
                self.opponents[seat] = PlaceholderBot(seed=self.rng.randrange(2**32))
        self._state: Optional[RoundState] = None

    @property
    def state(self) -> Optional[RoundState]:
        return self._state

    # ---- Public API ----

    def reset(self) -> StepResult:
        automated = [seat != self.learning_seat for seat in range(self.config.num_seats)]
        names = [f"Seat {seat + 1}" for seat in range(self.config.num_seats)]
        self._state = new_round(names, automated, config=self.config, rng=self.rng)
        self._advance_opponents()
        return self._result()

    def step(self, action: int) -> StepResult:
        if self._state is None:
            raise ValueError("Call reset() before step()")
        if self._state.phase == Phase.FINISHED:
            return self._result(reward=0.0)
        mask = self.actions.legal_mask(self._state, self.config)
        if not 0 <= action < self.actions.size or not mask[action]:
            raise ValueError(f"Illegal action {action} in phase {self._state.phase.value}")
        self._state = self.actions.apply(self._state, action, self.config)
        self._advance_opponents()
        return self._result()

    # ---- Internal helpers ----

    def _advance_opponents(self) -> None:
        state = self._state
        assert state is not None
        while state.phase in (Phase.BIDDING, Phase.PLAYING) and state.current_seat != self.learning_seat:
            seat = state.current_seat
            policy = self.opponents[seat]
            if state.phase == Phase.BIDDING:
                nxt = place_bid(state, policy.choose_bid(state, seat, self.config), self.config)
                if nxt is state:
                    nxt = place_bid(state, PASS, self.config)
            else:
                nxt = play_card(state, policy.choose_card(state, seat))
                if nxt is state:
                    nxt = play_card(state, legal_cards(state)[0])
            state = nxt
        self._state = state

    def _result(self, reward: float | None = None) -> StepResult:
        state = self._state
        assert state is not None
        done = state.phase == Phase.FINISHED
        if reward is None:
            reward = float(state.scores[self.learning_seat]) if done else 0.0
        info: dict = {
            "phase": state.phase.value,
            "current_bid": state.current_bid,
            "bid_winner": state.bid_winner,
            "tricks_played": len(state.tricks),
        }
        if done:
            info["scores"] = tuple(state.scores)
        return StepResult(
            obs=encode_observation(state, self.learning_seat, self.config),
            reward=reward,
            done=done,
            info=info,
            legal_actions_mask=self.actions.legal_mask(state, self.config),
        )

