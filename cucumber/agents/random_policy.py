from __future__ import annotations
from typing import List, Optional
from ..core.cards import card_value
from ..core.rng import RandomFn, random_index, random_number_generator
from ..core.types import GameState
from .base import Agent

class RandomPolicy(Agent):
    """
    Uniform choice among the offered moves.

    Args:
        rng (Optional[RandomFn]): Stream to draw from. Defaults to the stream for seed "0".
        avoid_discard (bool): Never pick index 0 when another move is offered,
            i.e. always try to take the trick.
    """

    def __init__(self, rng: Optional[RandomFn] = None, avoid_discard: bool = False):
        self.rng = rng or random_number_generator("0")
        self.avoid_discard = avoid_discard

    def __call__(self, s: GameState, moves: List[int]) -> int:
        if not moves: raise ValueError("no moves to choose from")
        if self.avoid_discard and len(moves) > 1 and moves[0] == 0:
            return moves[1 + random_index(self.rng, len(moves) - 1)]
        return moves[random_index(self.rng, len(moves))]

class HighestCardPolicy(Agent):
    """Get rid of high cards early: play the highest-ranked move."""

    def __call__(self, s: GameState, moves: List[int]) -> int:
        if not moves: raise ValueError("no moves to choose from")
        cards = s.players[s.player_index].cards
        return max(moves, key=lambda m: (card_value(cards[m]), m))
