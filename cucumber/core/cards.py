"""
Card representation and utilities for Cucumber.

Each card is an integer from 0 to 51.  Gameplay only looks at the rank;
the suit exists so that a deck holds four distinct copies of every rank.

Constants:
    RANK_SYMBOLS: The 13 rank symbols in ascending order ("23456789TJQKA")
    ACE: Rank of the highest card (12)

Functions:
    card_value(c): Rank of a card (0-12, where 12=Ace)
    suit_of(c): Suit of a card (0-3)
    card_to_string(c): Single-character symbol of a card's rank
    card_from_string(s): Rank for a symbol, raises InvalidCardError
    sort_cards(cs): Sort in place by rank, ties by identity
    make_deck(n): Card identities 0..n-1

Card Encoding:
    Cards 0-12: 2..A of suit 0
    Cards 13-25: 2..A of suit 1
    Cards 26-38: 2..A of suit 2
    Cards 39-51: 2..A of suit 3
"""

from typing import Iterable, List

from .errors import InvalidCardError

RANK_SYMBOLS = "23456789TJQKA"
NUM_RANKS = len(RANK_SYMBOLS)
ACE = NUM_RANKS - 1
DECK_SIZE = 52

_SYMBOL_RANK = {s: i for i, s in enumerate(RANK_SYMBOLS)}


def card_value(c: int) -> int:
    """
    Get the rank of a card.

    Args:
        c: Card integer (0-51)

    Returns:
        int: Card rank (0-12, where 8=T, 9=J, 10=Q, 11=K, 12=A)
    """
    return c % NUM_RANKS


rank_of = card_value


def suit_of(c: int) -> int:
    return c // NUM_RANKS


def card_to_string(c: int) -> str:
    """Symbol for the rank of card ``c``; only ``c % 13`` matters, e.g. 0, 13 and 26 are all "2"."""
    return RANK_SYMBOLS[card_value(c)]


def card_from_string(s: str) -> int:
    """
    Convert a rank symbol back to its rank.

    Raises:
        InvalidCardError: If ``s`` is not one of ``23456789TJQKA``.
    """
    rank = _SYMBOL_RANK.get(s)
    if rank is None:
        raise InvalidCardError(f"Invalid card: {s}")
    return rank


def cards_to_string(cs: Iterable[int]) -> str:
    return "".join(card_to_string(c) for c in cs)


def cards_from_string(s: str) -> List[int]:
    return [card_from_string(ch) for ch in s]


def sort_cards(cs: List[int]) -> List[int]:
    """
    Sort cards ascending by rank, breaking ties by raw identity.

    The list is sorted in place and returned, so move indices into a hand are
    stable for a given set of cards.
    """
    cs.sort(key=lambda c: (card_value(c), c))
    return cs


def make_deck(n: int = DECK_SIZE) -> List[int]:
    """
    Create a deck of ``n`` card identities (0..n-1).

    A restricted deck (``n < 52``) keeps the analysis state space small; with
    ``n = 20`` the deck holds one full suit plus 2..8 of the second.
    """
    if not 0 < n <= DECK_SIZE:
        raise ValueError(f"deck size must be in 1..{DECK_SIZE}, got {n}")
    return list(range(n))
