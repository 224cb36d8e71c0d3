"""
Baseline seat policies.

Two shapes of policy live here:

- ``SeatPolicy`` works on engine snapshots: ``choose_bid`` and ``choose_card``.
  ``PlaceholderBot`` is the table's default automated seat: it raises by one
  step on a coin flip when its hand is worth enough, and plays its first legal
  card.
- ``Policy`` works on flat observations: ``act(obs, legal_actions_mask)``.
  ``RandomAgent`` picks uniformly among legal indices and drives ``TwoTwentyEnv``.
"""
from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Iterable, Protocol, Sequence

import numpy as np

from .bidding import PASS
from .config import DEFAULT_CONFIG, RulesConfig
from .deck import Card, cards_point_total
from .game import RoundState, legal_cards


class SeatPolicy(Protocol):
    """Decision policy for an automated seat, fed with full snapshots."""

    def choose_bid(self, state: RoundState, seat: int, config: RulesConfig) -> int:
        """Return a bid value, or 0 to pass."""

    def choose_card(self, state: RoundState, seat: int) -> Card:
        """Return one of ``legal_cards(state)``."""


class Policy(Protocol):
    """Stateless or stateful decision policy working on flat observations."""

    def act(self, obs: Sequence[float], legal_actions_mask: Iterable[bool]) -> int:
        """
        Choose an action index given an observation and a boolean legal-action mask.

        Implementations must only return indices where ``legal_actions_mask[i]`` is
        true; callers are free to validate or fall back to a default if needed.
        """


@dataclass
class PlaceholderBot:
    """
    Stand-in automated seat, not a serious player.

    Usage:
        bot = PlaceholderBot(seed=7)
        value = bot.choose_bid(state, seat, config)
    """

    seed: int | None = None

    def __post_init__(self) -> None:
        self._rng = random.Random(self.seed)

    def choose_bid(self, state: RoundState, seat: int, config: RulesConfig = DEFAULT_CONFIG) -> int:
        hand_points = cards_point_total(state.hand(seat))
        wants_to_bid = self._rng.random() > 0.5 and hand_points > config.bot_bid_threshold
        if wants_to_bid and state.current_bid < config.bot_bid_ceiling:
            return state.current_bid + config.bid_step
        return PASS

    def choose_card(self, state: RoundState, seat: int) -> Card:
        legal = legal_cards(state)
        if not legal:
            raise ValueError(f"No legal card for seat {seat} in phase {state.phase.value}")
        return legal[0]


@dataclass
class RandomAgent:
    """
    Baseline policy that samples uniformly among legal actions.

    Usage:
        agent = RandomAgent(seed=42)
        action = agent.act(obs, legal_actions_mask)
    """

    seed: int | None = None

    def __post_init__(self) -> None:
        self._rng = random.Random(self.seed)

    def act(self, obs: Sequence[float], legal_actions_mask: Iterable[bool]) -> int:
        """Pick a random legal action given an observation and a boolean mask."""
        legal_indices = np.flatnonzero(np.asarray(list(legal_actions_mask), dtype=bool))
        if legal_indices.size == 0:
            raise ValueError("No legal actions available for RandomAgent")
        return int(self._rng.choice(legal_indices.tolist()))


__all__ = ["SeatPolicy", "Policy", "PlaceholderBot", "RandomAgent"]
