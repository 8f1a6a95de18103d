# cucumber/core/valuation.py
"""
Position valuation for Cucumber.

``valuate_static`` scores a finished table (one card per seat).  Positions
earlier in a round are valued by ``valuate_monte_carlo``: opponents' hidden
hands are redealt from the unseen cards (rejecting deals that contradict
their observed discards), the table is played out with a move policy, and
the static scores of the resulting endgames are averaged.
"""

from __future__ import annotations
import logging
from typing import Dict, List, Optional, Tuple

from .cards import ACE, card_from_string, card_to_string, card_value, cards_to_string, sort_cards
from .config import ValuationConfig
from .engine import CucumberEngine
from .errors import NotEndgameError, PolicyError, PolicyRequiredError
from .rng import RandomFn, Seed, run_rng
from .types import Deck, GamePhase, GameState, MonteCarloResult, Policy

logger = logging.getLogger(__name__)

ACE_PENALTY = 50

_engine = CucumberEngine()


def _score(rank: int, max_rank: int) -> int:
    return rank + 2 if rank >= max_rank else 0


def valuate_static(state: GameState, player_index: int, include_other_players: bool = False) -> float:
    """
    Score a table where every hand holds exactly one card.

    Args:
        state (GameState): Endgame state.
        player_index (int): Seat to score.
        include_other_players (bool): If True, score relative to the mean of
            the other seats and flip the sign, so higher is better.  If False,
            return the seat's own score (rank + 2 when holding the highest
            rank, else 0), where lower is better.

    Returns:
        float: The valuation.

    Raises:
        NotEndgameError: If any hand does not hold exactly one card.

    Example:
        - Hands ``Q,Q,Q,7`` with cross scoring: ``[-4, -4, -4, 12]``
        - Hands ``A,9`` with cross scoring: ``[-50, 50]``
    """
    for i, p in enumerate(state.players):
        if len(p.cards) != 1:
            raise NotEndgameError(f"can only valuate static for one card, player {i} holds {len(p.cards)}")
    ranks = [card_value(p.cards[0]) for p in state.players]
    own = ranks[player_index]
    if own == ACE:
        return -ACE_PENALTY
    if include_other_players and any(r == ACE for i, r in enumerate(ranks) if i != player_index):
        return ACE_PENALTY
    max_rank = max(ranks)
    player_score = _score(own, max_rank)
    if not include_other_players:
        return player_score
    other_score = sum(_score(r, max_rank) for i, r in enumerate(ranks) if i != player_index)
    others = len(ranks) - 1
    return -(player_score - (other_score / others if others else 0))


def calc_remaining_deck(state: GameState, player_index: Optional[int] = None) -> Deck:
    """
    Cards unseen from ``player_index``'s point of view.

    Everything in the deck except that player's own hand and every card
    played by anyone so far.
    """
    if player_index is None:
        player_index = state.player_index
    used: List[int] = []
    for i, p in enumerate(state.players):
        used.extend(p.played_ids)
        if i == player_index:
            used.extend(p.cards)
    return state.deck.residual(used)


def random_game_state(original: GameState, rng: RandomFn, remaining_deck: Deck,
                      player_index: Optional[int] = None) -> Optional[GameState]:
    """
    Determinize hidden information.

    Every seat except ``player_index`` gets a fresh hand of the same size
    drawn from a copy of ``remaining_deck``.

    Returns:
        Optional[GameState]: The new state, or None when a redealt hand's
        lowest rank is below that seat's highest discard.  Such a hand would
        have forced the seat to throw the low card instead, so the sample is
        inconsistent with what was observed and must be skipped.
    """
    if player_index is None:
        player_index = original.player_index
    deck = remaining_deck.clone()
    players = [p.clone() for p in original.players]
    for i, player in enumerate(players):
        if i == player_index:
            continue
        new_cards = sort_cards(deck.draw_n(rng, len(player.cards)))
        if (new_cards and player.highest_discarded is not None
                and card_value(new_cards[0]) < player.highest_discarded):
            return None
        player.cards = new_cards
    return GameState(deck, players, original.player_index,
                     original.highest_played_value, original.highest_played_index)


def _choose(state: GameState, moves: List[int], policy: Optional[Policy]) -> int:
    if len(moves) == 1:
        return moves[0]
    if policy is None:
        raise PolicyRequiredError(f"cannot handle multiple moves {moves} without a policy")
    idx = policy(state, moves)
    if idx is None:
        raise PolicyError("policy returned None")
    if idx not in moves:
        raise PolicyError(f"policy returned {idx}, not one of {moves}")
    return idx


def play_out(state: GameState, policy: Optional[Policy] = None) -> GameState:
    """Play ``state`` in place until the active player has no move left."""
    while True:
        moves = _engine.possible_moves(state)
        if not moves:
            return state
        _engine.play_card(state, _choose(state, moves, policy))


def valuate_monte_carlo(state: GameState, rng: RandomFn, number_of_runs: int,
                        player_index: Optional[int] = None,
                        include_other_players: bool = False,
                        policy: Optional[Policy] = None) -> Optional[MonteCarloResult]:
    """
    Estimate the value of ``state`` for ``player_index`` by sampling.

    Args:
        state (GameState): Position to value; not modified.
        rng (RandomFn): Stream shared by all runs.
        number_of_runs (int): Determinizations to attempt.
        player_index (Optional[int]): Anchor seat whose hand stays fixed.
            Defaults to the active seat.
        include_other_players (bool): Passed to ``valuate_static``.
        policy (Optional[Policy]): Chooses among several legal moves during
            rollouts.  Required as soon as a rollout reaches such a decision.

    Returns:
        Optional[MonteCarloResult]: None if no determinization was accepted.

    Raises:
        PolicyRequiredError: A rollout needs a choice and no policy was given.
        PolicyError: The policy returned None or a move it was not offered.
    """
    if player_index is None:
        player_index = state.player_index
    remaining_deck = calc_remaining_deck(state, player_index)
    total_valuation = 0.0
    total_runs = 0
    latest_state: Optional[GameState] = None
    latest_start_state: Optional[GameState] = None
    for _ in range(number_of_runs):
        random_state = random_game_state(state, rng, remaining_deck, player_index)
        if random_state is None:
            continue
        latest_start_state = random_state.clone()
        latest_state = play_out(random_state, policy)
        total_valuation += valuate_static(random_state, player_index, include_other_players)
        total_runs += 1
    logger.debug("monte carlo: %d/%d runs accepted", total_runs, number_of_runs)
    if total_runs == 0:
        return None
    return MonteCarloResult(value=total_valuation / total_runs, runs=total_runs,
                            total_valuation=total_valuation, latest_state=latest_state,
                            latest_start_state=latest_start_state)


def valuate_moves(state: GameState, seed: Seed, number_of_runs: int,
                  policy: Optional[Policy] = None,
                  include_other_players: bool = True) -> Tuple[Dict[str, float], Dict[str, int]]:
    """
    Compare the legal moves of the active player.

    For run ``j`` every move is tried on its own clone with the substream
    ``run_rng(seed, j)``, so all moves face the same sampled deals.

    Returns:
        Tuple[Dict[str, float], Dict[str, int]]: Mean value and successful
        run count per move, keyed by the symbol of the card played.  Moves
        without a successful run are left out.
    """
    player_index = state.player_index
    moves = _engine.possible_moves(state)
    hand = state.players[player_index].cards
    symbols = [card_to_string(hand[m]) for m in moves]
    totals = [0.0] * len(moves)
    runs = [0] * len(moves)
    for j in range(number_of_runs):
        for k, m in enumerate(moves):
            s = state.clone()
            _engine.play_card(s, m)
            x = valuate_monte_carlo(s, run_rng(seed, j), 1, player_index,
                                    include_other_players, policy)
            if x is None:
                continue
            totals[k] += x.value
            runs[k] += 1
    values = {c: totals[k] / runs[k] for k, c in enumerate(symbols) if runs[k] > 0}
    counts = {c: runs[k] for k, c in enumerate(symbols) if runs[k] > 0}
    logger.debug("%s %s %s", state_key(state), cards_to_string(hand[m] for m in moves),
                " ".join(f"{c}:{v:.2f}" for c, v in values.items()))
    return values, counts


def valuate_moves_with_config(state: GameState, config=None, policy: Optional[Policy] = None,
                              **kwargs) -> Tuple[Dict[str, float], Dict[str, int]]:
    """
    ``valuate_moves`` driven by a ``ValuationConfig`` or a plain dict of its
    fields; keyword arguments override dict entries.
    """
    if not isinstance(config, ValuationConfig):
        config = ValuationConfig.from_dict(config, **kwargs)
    elif kwargs:
        raise TypeError("keyword overrides require a dict config")
    return valuate_moves(state, config.seed, config.num_runs, policy, config.include_other_players)


def best_move(values: Dict[str, float]) -> Optional[str]:
    """Symbol with the highest value; ties go to the higher rank."""
    best: Optional[str] = None
    for card, value in values.items():
        if best is None or (value, card_from_string(card)) > (values[best], card_from_string(best)):
            best = card
    return best


def state_key(state: GameState) -> str:
    """Lookup key ``"<active hand>-<winning rank>"``, e.g. ``"58K-Q"``."""
    hv = state.highest_played_value
    hc = "" if hv is None else card_to_string(hv)
    return f"{cards_to_string(state.players[state.player_index].cards)}-{hc}"


def phase_for_state(state: GameState) -> GamePhase:
    """
    Decision context of the active player.

    With more than two seats and at least two cards already on the open
    trick, the trick winner's relative position is part of the phase, except
    for the last seat of a three-card round where the move is forced anyway.
    """
    n = len(state.players)
    cards = len(state.players[state.player_index].cards)
    idx = _engine.calc_position_index(state)
    highest: Optional[int] = None
    if (state.highest_played_index is not None and n > 2 and idx > 1
            and not (cards == 3 and idx == n - 1)):
        diff = (state.player_index + n - state.highest_played_index) % n
        if idx - diff < 0:
            raise ValueError(f"inconsistent trick: position {idx}, winner offset {diff}")
        highest = idx - diff
    return GamePhase(n, cards, idx, highest)
