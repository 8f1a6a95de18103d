from __future__ import annotations
import logging
from typing import List, Mapping, Optional
from ..core.cards import card_to_string
from ..core.errors import PolicyError
from ..core.types import GameState
from ..core.valuation import phase_for_state, state_key
from .base import Agent

logger = logging.getLogger(__name__)

ValueDict = Mapping[str, float]

class LookupPolicy(Agent):
    """
    Play the move with the best tabulated value.

    Tables are keyed first by phase model name (see ``GamePhase``), then by
    ``state_key`` of the deciding state, and map card symbols to values, e.g.
    ``{"330": {"58K-Q": {"5": -1.2, "K": 0.4}}}`` as produced by
    ``valuate_moves``.

    Args:
        tables: Phase name -> state key -> symbol -> value.
        fallback (Optional[Agent]): Used when no table entry covers the state.
    """

    def __init__(self, tables: Mapping[str, Mapping[str, ValueDict]],
                 fallback: Optional[Agent] = None):
        self.tables = tables
        self.fallback = fallback

    def lookup(self, s: GameState) -> Optional[ValueDict]:
        table = self.tables.get(phase_for_state(s).model_name)
        if table is None:
            return None
        return table.get(state_key(s))

    def __call__(self, s: GameState, moves: List[int]) -> Optional[int]:
        values = self.lookup(s)
        if values is None:
            if self.fallback is None:
                raise PolicyError(f"no table entry for {phase_for_state(s).model_name}/{state_key(s)}")
            logger.debug("no table entry for %s, using fallback", state_key(s))
            return self.fallback(s, moves)
        cards = s.players[s.player_index].cards
        best: Optional[int] = None
        best_value: Optional[float] = None
        for m in moves:
            v = values.get(card_to_string(cards[m]))
            if v is None: continue
            # later moves hold higher ranks, so ties go to the higher card
            if best_value is None or v >= best_value:
                best, best_value = m, v
        return best
