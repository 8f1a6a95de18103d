# cucumber/core/types.py
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Callable, Iterable, List, Optional

from .cards import card_to_string, cards_to_string, make_deck, sort_cards
from .errors import DeckExhaustedError
from .rng import RandomFn, random_index


class Deck:
    """
    A draw source over a set of card identities.

    ``cards[:index]`` have been drawn, ``cards[index:]`` are still available.
    Drawing picks a uniform card from the undrawn suffix, swaps it to the
    cursor position and advances the cursor, so no identity is drawn twice and
    a partially drawn deck still yields uniform draws.

    Attributes:
        cards (List[int]): Card identities; drawn prefix followed by the undrawn suffix.
        index (int): Cursor; number of cards drawn so far.
    """

    def __init__(self, cards: Optional[Iterable[int]] = None):
        self.cards: List[int] = list(cards) if cards is not None else make_deck()
        self.index = 0

    def __len__(self) -> int:
        return len(self.cards) - self.index

    def __repr__(self) -> str:
        return f"Deck(cards={self.cards!r}, index={self.index})"

    @property
    def remaining(self) -> List[int]:
        return self.cards[self.index:]

    @property
    def drawn(self) -> List[int]:
        return self.cards[:self.index]

    def draw(self, rng: RandomFn) -> int:
        """
        Draw one card.

        Raises:
            DeckExhaustedError: If every card has been drawn.
        """
        if self.index >= len(self.cards):
            raise DeckExhaustedError("no more cards")
        i = self.index + random_index(rng, len(self.cards) - self.index)
        card = self.cards[i]
        self.cards[i] = self.cards[self.index]
        self.cards[self.index] = card
        self.index += 1
        return card

    def draw_n(self, rng: RandomFn, n: int) -> List[int]:
        return [self.draw(rng) for _ in range(n)]

    def residual(self, drawn: Iterable[int]) -> "Deck":
        """
        New deck holding exactly the cards not in ``drawn``.

        The result is rank-sorted (ties by identity) with its cursor at 0,
        regardless of how far this deck has been drawn.
        """
        used = set(drawn)
        return Deck(sort_cards([c for c in self.cards if c not in used]))

    def clone(self) -> "Deck":
        d = Deck(self.cards)
        d.index = self.index
        return d


@dataclass
class Player:
    """
    One seat at the table.

    Attributes:
        cards (List[int]): Hand as card identities, kept sorted by rank then identity.
        played_cards (List[int]): Ranks played so far, in trick order.
        highest_discarded (Optional[int]): Highest rank played without taking
            the trick, None if the player has not lost a trick yet.
        played_ids (List[int]): Identities of the played cards, parallel to
            ``played_cards``.
    """

    cards: List[int]
    played_cards: List[int] = field(default_factory=list)
    highest_discarded: Optional[int] = None
    played_ids: List[int] = field(default_factory=list)

    def __post_init__(self):
        self.cards = sort_cards(list(self.cards))

    def clone(self) -> "Player":
        return Player(list(self.cards), list(self.played_cards),
                      self.highest_discarded, list(self.played_ids))


class GameState:
    """
    Complete state of a Cucumber table.

    The state is mutated in place by ``CucumberEngine.play_card``; any
    speculative branch must work on ``clone()``.

    Attributes:
        deck (Deck): Deck the hands were dealt from.
        players (List[Player]): Seats in turn order.
        player_index (int): Seat whose turn it is.
        highest_played_value (Optional[int]): Rank currently winning the open
            trick, None when no trick is open.
        highest_played_index (Optional[int]): Seat that played that rank, None
            exactly when ``highest_played_value`` is None.
    """

    def __init__(self, deck: Deck, players: List[Player], player_index: int = 0,
                 highest_played_value: Optional[int] = None,
                 highest_played_index: Optional[int] = None):
        if not 0 <= player_index < len(players):
            raise IndexError(f"player_index {player_index} out of range for {len(players)} players")
        if (highest_played_value is None) != (highest_played_index is None):
            raise ValueError("highest_played_value and highest_played_index must be set together")
        self.deck = deck
        self.players = players
        self.player_index = player_index
        self.highest_played_value = highest_played_value
        self.highest_played_index = highest_played_index

    @property
    def current_player(self) -> Player:
        return self.players[self.player_index]

    @property
    def trick_open(self) -> bool:
        return self.highest_played_value is not None

    def is_endgame(self) -> bool:
        return all(len(p.cards) == 1 for p in self.players)

    def clone(self) -> "GameState":
        return GameState(self.deck.clone(), [p.clone() for p in self.players],
                         self.player_index, self.highest_played_value,
                         self.highest_played_index)

    def to_string(self, simple: bool = True) -> str:
        """
        Render the table.

        Args:
            simple (bool): If True, all hands comma-separated with ``*`` before
                the active seat, e.g. ``*238,8JK,66A``.  Otherwise one line per
                seat: hand, played ranks and highest discard, e.g.
                ``P3  46 : 3 3``.
        """
        if simple:
            return ",".join(f"{'*' if i == self.player_index else ''}{cards_to_string(p.cards)}"
                            for i, p in enumerate(self.players))
        width = max(len(p.played_cards) for p in self.players)
        lines = []
        for i, p in enumerate(self.players):
            marker = "*" if i == self.player_index else " "
            played = cards_to_string(p.played_cards).ljust(width)
            discarded = card_to_string(p.highest_discarded) if p.highest_discarded is not None else " "
            lines.append(f"P{i + 1}{marker} {cards_to_string(p.cards)} : {played} {discarded}".rstrip())
        return "\n".join(lines)

    def __str__(self) -> str:
        return self.to_string()

    def __repr__(self) -> str:
        return f"GameState({self.to_string()!r})"


Policy = Callable[[GameState, List[int]], Optional[int]]


@dataclass
class MonteCarloResult:
    """
    Aggregate of a Monte Carlo valuation.

    Attributes:
        value (float): Mean static valuation over successful runs.
        runs (int): Number of runs whose determinization was accepted.
        total_valuation (float): Sum of the static valuations.
        latest_state (Optional[GameState]): Endgame reached by the last
            successful run.
        latest_start_state (Optional[GameState]): Determinized state that run
            started from, before its rollout.
    """

    value: float
    runs: int
    total_valuation: float
    latest_state: Optional[GameState] = None
    latest_start_state: Optional[GameState] = None


@dataclass(frozen=True)
class GamePhase:
    """
    Key for one decision context: table size, hand size and seat position.

    Attributes:
        number_of_players (int): Seats at the table.
        number_of_cards (int): Cards in the deciding player's hand.
        player_index (int): Position in the current trick (see ``calc_position_index``).
        highest_played_index (Optional[int]): Position of the trick winner
            relative to the deciding player, when it distinguishes phases.
    """

    number_of_players: int
    number_of_cards: int
    player_index: int
    highest_played_index: Optional[int] = None

    @property
    def model_name(self) -> str:
        return to_model_name(self.number_of_players, self.number_of_cards,
                             self.player_index, self.highest_played_index)

    def __str__(self) -> str:
        return self.model_name


def to_model_name(number_of_players: int, number_of_cards: int, player_index: int,
                  highest_played_index: Optional[int]) -> str:
    hp = "" if highest_played_index is None else str(highest_played_index)
    return f"{number_of_players}{number_of_cards}{player_index}{hp}"
