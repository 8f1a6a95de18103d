import pytest

from conftest import play_last_moves, state_from_hands
from cucumber.agents.random_policy import HighestCardPolicy, RandomPolicy
from cucumber.core.cards import card_value, make_deck
from cucumber.core.errors import PolicyError, PolicyRequiredError
from cucumber.core.rng import random_number_generator
from cucumber.core.types import Deck, GameState, Player
from cucumber.core.valuation import calc_remaining_deck, random_game_state, valuate_monte_carlo


@pytest.fixture
def after_round(engine):
    s = state_from_hands("238,8JK,66A")
    play_last_moves(engine, s, 3)
    assert s.to_string(False) == "P1  23 : 8\nP2  8J : K\nP3* 66 : A"
    return s


def rejecting_state() -> GameState:
    """Seat 1 threw a K without winning, but only one card >= K is unseen."""
    p0 = Player([0, 1])
    p1 = Player([5, 7], played_cards=[11], highest_discarded=11, played_ids=[11])
    return GameState(Deck(make_deck(13)), [p0, p1], 0)


def test_remaining_deck_excludes_own_hand_and_played_cards(after_round):
    r = calc_remaining_deck(after_round)
    assert len(r) == 52 - 2 - 3
    assert not set(r.cards) & {4, 17, 6, 11, 12}
    assert r.cards == sorted(r.cards, key=lambda c: (card_value(c), c))


def test_remaining_deck_for_other_seat(after_round):
    r = calc_remaining_deck(after_round, 0)
    assert not set(r.cards) & {0, 1, 6, 11, 12}
    assert {4, 17} <= set(r.cards)


def test_random_game_state_keeps_anchor(after_round):
    rng = random_number_generator("124")
    st = random_game_state(after_round, rng, calc_remaining_deck(after_round))
    assert st is not None
    assert st.players[2].cards == after_round.players[2].cards
    assert [len(p.cards) for p in st.players] == [2, 2, 2]
    seen = [c for p in st.players for c in p.cards] + [c for p in st.players for c in p.played_ids]
    assert len(seen) == len(set(seen))
    for p in st.players:
        assert p.cards == sorted(p.cards, key=lambda c: (card_value(c), c))
    assert st.player_index == after_round.player_index
    assert after_round.to_string(False) == "P1  23 : 8\nP2  8J : K\nP3* 66 : A"


def test_random_game_state_rejects_inconsistent_deal():
    s = rejecting_state()
    rng = random_number_generator("110")
    for _ in range(20):
        assert random_game_state(s, rng, calc_remaining_deck(s)) is None


def test_zero_runs_is_none(after_round):
    assert valuate_monte_carlo(after_round, random_number_generator("123"), 0) is None


def test_all_runs_rejected_is_none():
    s = rejecting_state()
    assert valuate_monte_carlo(s, random_number_generator("123"), 100) is None


def test_monte_carlo_counts_and_endgame(after_round):
    x = valuate_monte_carlo(after_round, random_number_generator("123"), 200)
    assert x is not None
    assert x.runs == 200
    assert x.value == x.total_valuation / x.runs
    # seat 3 keeps a 6: it scores 6 when nobody holds higher, else 0
    assert x.total_valuation % 6 == 0
    assert x.latest_state.is_endgame()
    assert x.latest_start_state.players[2].cards == after_round.players[2].cards
    assert not after_round.is_endgame()


def test_monte_carlo_is_reproducible(after_round):
    a = valuate_monte_carlo(after_round, random_number_generator("123"), 300, include_other_players=True)
    b = valuate_monte_carlo(after_round, random_number_generator("123"), 300, include_other_players=True)
    assert (a.value, a.runs, a.total_valuation) == (b.value, b.runs, b.total_valuation)
    assert a.latest_state.to_string() == b.latest_state.to_string()


def test_small_table_deal(small_table):
    _, s = small_table
    assert s.to_string(False) == "P1* 28 : A\nP2  6T : 3 3\nP3  77 : 5 5"


def test_small_table_rejects_inconsistent_deals(small_table):
    _, s = small_table
    x = valuate_monte_carlo(s, random_number_generator("123"), 1000)
    # seat 1 leads 28 and always keeps the 2
    assert (x.runs, x.total_valuation, x.value) == (444, 0.0, 0.0)


def test_monte_carlo_value_varies_between_runs(after_round):
    # the 6 of seat 3 scores in some deals and not in others
    x = valuate_monte_carlo(after_round, random_number_generator("123"), 200)
    assert 0 < x.value < 6


def test_anchor_other_than_active_seat(after_round):
    x = valuate_monte_carlo(after_round, random_number_generator("9"), 50, player_index=0)
    assert x is not None
    assert x.latest_start_state.players[0].cards == after_round.players[0].cards


def test_multiple_moves_without_policy_raises():
    s = state_from_hands("234,567,89T")
    with pytest.raises(PolicyRequiredError):
        valuate_monte_carlo(s, random_number_generator("1"), 1)


@pytest.mark.parametrize("policy", [lambda s, moves: None, lambda s, moves: 99])
def test_invalid_policy_result_raises(policy):
    s = state_from_hands("234,567,89T")
    with pytest.raises(PolicyError):
        valuate_monte_carlo(s, random_number_generator("1"), 1, policy=policy)


@pytest.mark.parametrize("make_policy", [
    lambda: RandomPolicy(random_number_generator("p")),
    lambda: RandomPolicy(random_number_generator("p"), avoid_discard=True),
    lambda: HighestCardPolicy(),
])
def test_rollouts_with_policy(make_policy):
    s = state_from_hands("234,567,89T")
    x = valuate_monte_carlo(s, random_number_generator("1"), 50, include_other_players=True,
                            policy=make_policy())
    assert x is not None
    assert x.runs == 50
    assert x.latest_state.is_endgame()
    assert s.to_string() == "*234,567,89T"


def test_policy_sees_rollout_state_and_moves():
    calls = []

    def policy(st, moves):
        calls.append((st.player_index, list(moves)))
        assert len(moves) > 1
        assert all(0 <= m < len(st.players[st.player_index].cards) for m in moves)
        return moves[-1]

    s = state_from_hands("234,567,89T")
    valuate_monte_carlo(s, random_number_generator("1"), 5, policy=policy)
    assert calls
    assert calls[0] == (0, [1, 2])
