"""Tests for the single-writer table and its bot action queue."""
import random

from twotwenty.config import RulesConfig
from twotwenty.deck import Suit, make_deck_32, parse_card
from twotwenty.game import Phase, new_round
from twotwenty.table import ActionQueue, BotTurn, ManualClock, Table, turn_key

NAMES = ("Ann", "Ben", "Cat", "Dan")


def _table(automated, seed: int = 0, deck=None) -> Table:
    rng = random.Random(seed)
    state = new_round(NAMES, automated, rng=rng, deck=deck)
    return Table(state, queue=ActionQueue(clock=ManualClock()), rng=rng)


class _IllegalCardBot:
    """Always proposes a card it cannot play, and bids nonsense."""

    def choose_bid(self, state, seat, config):
        return 75

    def choose_card(self, state, seat):
        return parse_card("AH") if state.hand(seat)[0] != parse_card("AH") else parse_card("AS")


def test_action_queue_runs_in_due_order():
    clock = ManualClock()
    queue = ActionQueue(clock=clock)
    ran = []
    queue.schedule(lambda: ran.append("a"), delay=2.0)
    queue.schedule(lambda: ran.append("b"), delay=1.0)
    queue.schedule(lambda: ran.append("c"), delay=1.0)
    assert len(queue) == 3
    assert queue.run_pending() == 0
    clock.advance(1.0)
    assert queue.run_pending() == 2
    assert ran == ["b", "c"]
    clock.advance(1.0)
    queue.run_pending()
    assert ran == ["b", "c", "a"]
    assert queue.next_due() is None


def test_all_bot_table_plays_to_the_end():
    table = _table([True] * 4, seed=3)
    state = table.run_until_idle()
    assert state.phase == Phase.FINISHED
    assert len(state.tricks) == 8
    assert sum(state.scores) == 220
    assert len(table.queue) == 0


def test_bot_waits_for_its_delay():
    table = _table([False, True, True, True])
    assert len(table.queue) == 0  # seat 0 is human and speaks first
    table.place_bid(80)
    assert len(table.queue) == 1
    assert not table.queue.due()
    table.queue.clock.advance(table.config.bot_delay)
    assert table.queue.due()


def test_stale_bot_turn_is_a_no_op():
    table = _table([False, True, False, False])
    table.place_bid(80, seat=0)
    assert table.state.current_seat == 1
    assert len(table.queue) == 1
    # Someone else answers for seat 1 before its bot turn fires.
    table.pass_bid()
    before = table.state
    assert before.current_seat == 2
    table.queue.clock.advance(table.config.bot_delay)
    table.queue.run_pending()
    assert table.state is before


def test_bot_turn_checks_key_at_run_time():
    table = _table([False, True, True, True])
    table.place_bid(80, seat=0)
    turn = BotTurn(table, ("bogus",))
    before = table.state
    turn()
    assert table.state is before
    assert turn_key(before) != turn.key


def test_action_for_wrong_seat_is_rejected():
    table = _table([False] * 4)
    before = table.state
    assert table.place_bid(80, seat=2) is before
    assert table.play_card(before.hand(0)[0], seat=0) is before
    assert table.state is before


def test_human_trump_choice_then_bots_play_on():
    table = _table([False, True, True, True], deck=make_deck_32())
    table.place_bid(220, seat=0)
    state = table.run_until_idle()
    # Nobody can outbid 220, so the bots pass and seat 0 picks trump.
    assert state.phase == Phase.SELECTING_TRUMP
    assert state.current_seat == 0
    table.select_trump(Suit.HEARTS, seat=0)
    while table.state.phase != Phase.FINISHED:
        state = table.run_until_idle()
        if state.phase == Phase.PLAYING and state.current_seat == 0:
            table.play_card(state.hand(0)[0], seat=0)
    assert table.state.scores == (220, 0, 0, 0)


def test_listeners_see_every_new_snapshot():
    table = _table([False] * 4)
    seen = []
    unsubscribe = table.subscribe(seen.append)
    table.place_bid(80)
    table.place_bid(70)  # rejected: no notification
    table.pass_bid()
    assert [s.current_bid for s in seen] == [80, 80]
    assert seen[-1] is table.state
    unsubscribe()
    table.pass_bid()
    assert len(seen) == 2


def test_illegal_policy_choice_falls_back_to_a_legal_move():
    rng = random.Random(9)
    state = new_round(NAMES, [True] * 4, rng=rng)
    bad = {seat: _IllegalCardBot() for seat in range(4)}
    table = Table(state, queue=ActionQueue(clock=ManualClock()), policies=bad, rng=rng)
    final = table.run_until_idle()
    assert final.phase == Phase.FINISHED
    assert sum(final.scores) == 220


def test_start_round_drops_pending_turns():
    table = _table([True] * 4)
    assert len(table.queue) == 1
    old = table.state
    new = table.start_round()
    assert new is not old
    assert new.phase == Phase.BIDDING
    assert len(table.queue) == 1
    assert [s.name for s in new.seats] == list(NAMES)


def test_custom_delay_from_config():
    rng = random.Random(2)
    cfg = RulesConfig(bot_delay=0.25)
    table = Table(new_round(NAMES, [True] * 4, config=cfg, rng=rng), config=cfg,
                  queue=ActionQueue(clock=ManualClock()), rng=rng)
    assert table.queue.next_due() == 0.25
