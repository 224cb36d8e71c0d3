"""
Bidding for 4 players.
Seats speak in turn; each either raises the current bid by at least one step or
passes for good. Bidding closes when three seats have passed. The highest bid
stands; if nobody bid, the last seat still in takes it at the floor.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import NamedTuple, Union

from .config import DEFAULT_CONFIG, RulesConfig

logger = logging.getLogger(__name__)

PASS = 0  # bid value meaning "pass"
PASSED = "pass"  # bid record of a seat that passed

BidRecord = Union[int, str, None]


class BiddingResult(NamedTuple):
    """Outcome of a closed bidding: who sets trump and for how much."""
    winner: int
    bid: int


@dataclass(frozen=True)
class BidState:
    """Immutable bidding snapshot. Every transition returns a new value."""

    current_seat: int
    current_bid: int
    bid_winner: int | None
    bids: tuple[BidRecord, ...]
    active: tuple[int, ...]
    pass_count: int = 0
    closed: bool = False

    @property
    def num_seats(self) -> int:
        return len(self.bids)

    def is_active(self, seat: int) -> bool:
        return seat in self.active


def new_bidding(config: RulesConfig = DEFAULT_CONFIG, first_seat: int = 0) -> BidState:
    """All seats in, nobody has spoken, bid at the floor."""
    return BidState(
        current_seat=first_seat,
        current_bid=config.floor_bid,
        bid_winner=None,
        bids=(None,) * config.num_seats,
        active=tuple(range(config.num_seats)),
    )


def next_active_seat(state: BidState, seat: int, active: tuple[int, ...] | None = None) -> int:
    """First seat after ``seat`` (wrapping) that is still bidding."""
    if active is None:
        active = state.active
    n = state.num_seats
    nxt = (seat + 1) % n
    for _ in range(n):
        if nxt in active:
            return nxt
        nxt = (nxt + 1) % n
    return seat


def is_valid_bid(state: BidState, value: int, config: RulesConfig = DEFAULT_CONFIG) -> bool:
    """True if the seat to speak may announce ``value`` (a raise, not a pass)."""
    if state.closed or not state.is_active(state.current_seat):
        return False
    if value < state.current_bid + config.bid_step or value > config.max_bid:
        return False
    return (value - config.floor_bid) % config.bid_step == 0


def apply_bid(state: BidState, value: int, config: RulesConfig = DEFAULT_CONFIG) -> BidState:
    """
    Apply a bid for the seat to speak. ``value == PASS`` passes.
    Returns ``state`` itself when the bid is not allowed.
    """
    if value == PASS:
        return apply_pass(state, config)
    if not is_valid_bid(state, value, config):
        logger.debug(
            "Rejected bid %s from seat %s (current %s)", value, state.current_seat, state.current_bid
        )
        return state
    seat = state.current_seat
    bids = list(state.bids)
    bids[seat] = value
    return replace(
        state,
        current_bid=value,
        bid_winner=seat,
        bids=tuple(bids),
        current_seat=next_active_seat(state, seat),
    )


def apply_pass(state: BidState, config: RulesConfig = DEFAULT_CONFIG) -> BidState:
    """The seat to speak drops out. Closes bidding on the third pass."""
    seat = state.current_seat
    if state.closed or not state.is_active(seat):
        logger.debug("Rejected pass from seat %s", seat)
        return state
    bids = list(state.bids)
    bids[seat] = PASSED
    active = tuple(s for s in state.active if s != seat)
    pass_count = state.pass_count + 1
    return replace(
        state,
        bids=tuple(bids),
        active=active,
        pass_count=pass_count,
        current_seat=next_active_seat(state, seat, active),
        closed=pass_count >= config.num_seats - 1,
    )


def bidding_result(state: BidState) -> BiddingResult | None:
    """
    Winner of a closed bidding, or None while it is still open.
    The top bidder is the seat left standing whenever somebody bid.
    With no bid at all the seat left standing takes the floor bid.
    """
    if not state.closed:
        return None
    winner = state.bid_winner if state.bid_winner is not None else state.current_seat
    return BiddingResult(winner=winner, bid=state.current_bid)
