"""Utilities for canonicalizing game states for comparison.

This module maps :class:`GameState` objects into nested tuples of built-in
Python types.  The representation is hashable, which makes it convenient for
checking that a clone and its original evolved identically, or for
de-duplicating determinized states.
"""

from __future__ import annotations

from typing import Any, Tuple

from .cards import card_value
from .types import GameState, Player


def _player_to_tuple(p: Player, include_cards: bool) -> Tuple[Any, ...]:
    """Convert a :class:`Player` into a tuple of its attributes."""
    cards = tuple(p.cards) if include_cards else tuple(card_value(c) for c in p.cards)
    return (cards, tuple(p.played_cards), p.highest_discarded)


def canonical_state(s: GameState, *, include_cards: bool = True) -> Tuple[Any, ...]:
    """Return a hashable canonical representation of ``s``.

    Parameters
    ----------
    s:
        The state to convert.
    include_cards:
        If ``True`` (default) hands are compared by card identity and the
        undrawn deck is included.  Set to ``False`` to compare ranks only,
        which is all that matters for play.
    """

    players = tuple(_player_to_tuple(p, include_cards) for p in s.players)
    deck = tuple(s.deck.remaining) if include_cards else ()
    return (
        players,
        s.player_index,
        s.highest_played_value,
        s.highest_played_index,
        deck,
    )


def states_equal(a: GameState, b: GameState, *, include_cards: bool = True) -> bool:
    """Determine if two ``GameState`` objects are equivalent."""

    return canonical_state(a, include_cards=include_cards) == canonical_state(b, include_cards=include_cards)
