"""
Command-line interface for 220.

Usage examples (after ``pip install -e .``):

    python -m twotwenty.cli simulate --rounds 5 --seed 1 --verbose
    python -m twotwenty.cli play --name Alice
    python -m twotwenty.cli --config rules.json --log-level DEBUG simulate
"""
from __future__ import annotations

import argparse
import logging
import random
from typing import Callable, Optional

from .bidding import BidRecord, PASS, is_valid_bid
from .config import DEFAULT_CONFIG, RulesConfig, load_config
from .deck import Suit
from .game import Phase, RoundState, legal_cards, new_round, ranked_scores
from .table import ActionQueue, ManualClock, Table

InputFn = Callable[[str], str]


def bid_label(record: BidRecord) -> str:
    """Text for a seat's bid record: '-', 'Passed' or 'Bid: N'."""
    if record is None:
        return "-"
    if isinstance(record, str):
        return "Passed"
    return f"Bid: {record}"


def format_trick(state: RoundState, trick_no: int) -> str:
    trick = state.tricks[trick_no]
    cards = " ".join(f"{state.seats[c.played_by].name}:{c}" for c in trick)
    return f"trick {trick_no + 1}: {cards}"


def print_ranking(state: RoundState) -> None:
    for place, (name, score) in enumerate(ranked_scores(state), start=1):
        print(f"  {place}. {name:<10} {score:>4}")


def _make_table(cfg: RulesConfig, seed: int, names, automated) -> Table:
    rng = random.Random(seed)
    state = new_round(names, automated, config=cfg, rng=rng)
    return Table(state, config=cfg, queue=ActionQueue(clock=ManualClock()), rng=rng)


# ---- simulate ----


def _add_simulate_parser(subparsers: argparse._SubParsersAction) -> None:
    parser = subparsers.add_parser(
        "simulate",
        help="Play bot-only rounds and print the final scores.",
    )
    parser.add_argument(
        "--rounds",
        type=int,
        default=1,
        help="Number of independent rounds to play.",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=0,
        help="Random seed for dealing and bot decisions.",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Print every trick as it is won.",
    )
    parser.set_defaults(func=_cmd_simulate)


def _cmd_simulate(args: argparse.Namespace) -> None:
    cfg: RulesConfig = args.rules
    names = ["Bot 1", "Bot 2", "Bot 3", "Bot 4"]
    for i in range(args.rounds):
        table = _make_table(cfg, args.seed + i, names, [True] * 4)
        state = table.run_until_idle()
        winner = state.bid_winner
        trump = state.trump.value if state.trump is not None else "none"
        print(
            f"[round {i + 1}/{args.rounds}] "
            f"bid={state.current_bid} by {state.seats[winner].name if winner is not None else '-'} "
            f"trump={trump}"
        )
        if args.verbose:
            for t in range(len(state.tricks)):
                print("  " + format_trick(state, t))
        print_ranking(state)


# ---- play ----


def _add_play_parser(subparsers: argparse._SubParsersAction) -> None:
    parser = subparsers.add_parser(
        "play",
        help="Play one round in the terminal as seat 1 against three bots.",
    )
    parser.add_argument(
        "--name",
        type=str,
        default="You",
        help="Your name at the table.",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed (omit for a fresh deal every time).",
    )
    parser.set_defaults(func=_cmd_play)


def _ask(input_fn: InputFn, prompt: str, valid: Callable[[str], bool]) -> str:
    while True:
        answer = input_fn(prompt).strip()
        if valid(answer):
            return answer
        print("  not allowed, try again")


def _human_bid(table: Table, input_fn: InputFn) -> None:
    state = table.state
    cfg = table.config
    options = [v for v in cfg.bid_levels() if is_valid_bid(state.bidding, v, cfg)]
    print(f"Current bid: {state.current_bid}")
    for seat, record in zip(state.seats, state.bids):
        print(f"  {seat.name:<10} {bid_label(record)}")
    print("Your hand: " + " ".join(str(c) for c in state.hand(0)))
    choices = ", ".join(str(v) for v in options)
    answer = _ask(
        input_fn,
        f"Bid ({choices}) or 0 to pass: ",
        lambda a: a.isdigit() and (int(a) == PASS or int(a) in options),
    )
    table.place_bid(int(answer), seat=0)


def _human_trump(table: Table, input_fn: InputFn) -> None:
    state = table.state
    print(f"You won the bidding at {state.current_bid}.")
    print("Your hand: " + " ".join(str(c) for c in state.hand(0)))
    names = [s.value for s in Suit]
    answer = _ask(input_fn, f"Trump ({', '.join(names)}): ", lambda a: a.lower() in names)
    table.select_trump(Suit(answer.lower()), seat=0)


def _human_card(table: Table, input_fn: InputFn) -> None:
    state = table.state
    legal = legal_cards(state)
    on_table = " ".join(f"{state.seats[c.played_by].name}:{c}" for c in state.current_trick)
    print(f"On the table: {on_table or '(you lead)'}")
    for i, card in enumerate(legal, start=1):
        print(f"  {i}. {card}")
    answer = _ask(
        input_fn,
        "Card number: ",
        lambda a: a.isdigit() and 1 <= int(a) <= len(legal),
    )
    table.play_card(legal[int(answer) - 1], seat=0)


def play_interactive(
    cfg: RulesConfig = DEFAULT_CONFIG,
    name: str = "You",
    seed: Optional[int] = None,
    input_fn: InputFn = input,
) -> RoundState:
    """Run one round with seat 0 answering through ``input_fn``."""
    table = _make_table(
        cfg,
        seed if seed is not None else random.randrange(2**32),
        [name, "Bot 1", "Bot 2", "Bot 3"],
        [False, True, True, True],
    )
    seen_tricks = 0

    def on_change(state: RoundState) -> None:
        nonlocal seen_tricks
        while seen_tricks < len(state.tricks):
            print(format_trick(state, seen_tricks))
            seen_tricks += 1

    table.subscribe(on_change)

    while True:
        state = table.run_until_idle()
        if state.phase == Phase.FINISHED:
            break
        if state.current_seat != 0:
            raise RuntimeError(f"Round stalled in phase {state.phase.value}")
        if state.phase == Phase.BIDDING:
            _human_bid(table, input_fn)
        elif state.phase == Phase.SELECTING_TRUMP:
            _human_trump(table, input_fn)
        elif state.phase == Phase.PLAYING:
            _human_card(table, input_fn)

    print("Final scores:")
    print_ranking(state)
    return state


def _cmd_play(args: argparse.Namespace) -> None:
    play_interactive(args.rules, name=args.name, seed=args.seed)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="twotwenty", description="220 card game rules engine CLI.")
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="JSON rules file (see RulesConfig); defaults to the standard rules.",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level for engine messages.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)
    _add_simulate_parser(subparsers)
    _add_play_parser(subparsers)
    return parser


def main(argv: Optional[list[str]] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    args.rules = load_config(args.config) if args.config else DEFAULT_CONFIG.validate()
    if hasattr(args, "func"):
        args.func(args)
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
