# cucumber/core/engine.py
from __future__ import annotations
from typing import Dict, List, Optional, Sequence

from .cards import ACE, DECK_SIZE, card_value, make_deck
from .rng import RandomFn, Seed, random_number_generator
from .types import Deck, GameState, Player


class CucumberEngine:
    """
    Rules of Cucumber.

    Every seat plays one card per trick.  A card ties or beats the open trick
    if its rank is at least the winning rank; an ace can never be beaten.  A
    player who cannot beat the trick throws away their lowest card.  Whoever
    holds the highest card once every hand is down to one card loses.

    Args:
        num_players (int): Seats at the table. Defaults to 3.
        num_cards (int): Cards dealt to every seat. Defaults to 3.
        cards (Optional[Sequence[int]]): Restrict the deck to these identities.
            Defaults to the full 52-card deck.
    """

    def __init__(self, num_players: int = 3, num_cards: int = 3,
                 cards: Optional[Sequence[int]] = None):
        if num_players < 1:
            raise ValueError("need at least one player")
        if num_cards < 1:
            raise ValueError("need at least one card per player")
        deck_size = len(cards) if cards is not None else DECK_SIZE
        if num_players * num_cards > deck_size:
            raise ValueError(f"cannot deal {num_players}x{num_cards} cards from {deck_size}")
        self.N = num_players
        self.num_cards = num_cards
        self.cards = list(cards) if cards is not None else None

    # ----- lifecycle -----
    def deal(self, rng: RandomFn, player_index: int = 0) -> GameState:
        """
        Deal a fresh table.

        Hands are drawn seat by seat, ``num_cards`` each, from one stream.

        Args:
            rng (RandomFn): Stream used for every draw.
            player_index (int, optional): Seat that leads. Defaults to 0.

        Returns:
            GameState: State with sorted hands, empty histories and no open trick.
        """
        deck = Deck(self.cards if self.cards is not None else make_deck())
        players = [Player(deck.draw_n(rng, self.num_cards)) for _ in range(self.N)]
        return GameState(deck, players, player_index)

    def reset(self, seed: Seed, player_index: int = 0) -> GameState:
        return self.deal(random_number_generator(seed), player_index)

    # ----- rules -----
    def possible_moves(self, s: GameState) -> List[int]:
        """
        Hand indices the active player may play.

        Moves that only differ by suit, or by which of several equal ranks is
        played, are collapsed into one index.

        Args:
            s (GameState): Current state.

        Returns:
            List[int]: Sorted hand indices.

        Notes:
            - A single remaining card is kept for the endgame: no moves.
            - If the trick is won by an ace or by a rank above the player's
              best card, only the lowest card (index 0) may be thrown away.
            - Otherwise every rank at index >= 1 that ties or beats the trick
              is offered once, at its last index in the hand.
            - With three cards, a player closing the round only gets the
              lowest winning candidate; in a two-player opening lead only the
              highest.
            - Index 0 is added as a discard when the lowest card cannot beat
              the trick.
        """
        player = s.players[s.player_index]
        cards = player.cards
        n = len(cards)
        if n <= 1:
            return []
        hv = s.highest_played_value
        if hv is not None and (hv == ACE or hv > card_value(cards[-1])):
            return [0]

        last_index: Dict[int, int] = {}
        for i in range(1, n):
            v = card_value(cards[i])
            if hv is not None and v < hv:
                continue
            last_index[v] = i
        ids = sorted(last_index.values())

        if n == 2:
            return ids
        if n == 3:
            next_player = s.players[(s.player_index + 1) % len(s.players)]
            if len(next_player.cards) < n:
                return ids[:1]
            if len(s.players) == 2 and hv is None:
                return ids[-1:]

        if hv is not None and card_value(cards[0]) < hv:
            return [0] + ids
        return ids

    def play_card(self, s: GameState, card_index: int) -> int:
        """
        Play a card from the active player's hand and advance the turn.

        Args:
            s (GameState): State to mutate.
            card_index (int): Index into the active player's hand.

        Returns:
            int: Rank of the played card.

        Raises:
            IndexError: If ``card_index`` is outside the hand.

        Side Effects:
            - Updates the open trick, or the player's highest discard when the
              card does not tie or beat it
            - Moves the card from the hand to the played history
            - Passes the turn on while the next seat still has more cards;
              otherwise the trick closes and its winner leads the next one
        """
        i = s.player_index
        player = s.players[i]
        if not 0 <= card_index < len(player.cards):
            raise IndexError(f"card index {card_index} out of range for hand of {len(player.cards)}")
        card = player.cards[card_index]
        rank = card_value(card)
        hv = s.highest_played_value
        if hv is None or (rank >= hv and hv != ACE):
            s.highest_played_value = rank
            s.highest_played_index = i
        elif player.highest_discarded is None or rank > player.highest_discarded:
            player.highest_discarded = rank
        del player.cards[card_index]
        player.played_cards.append(rank)
        player.played_ids.append(card)

        j = (i + 1) % len(s.players)
        if len(s.players[j].cards) > len(player.cards):
            s.player_index = j
        else:
            assert s.highest_played_index is not None
            s.player_index = s.highest_played_index
            s.highest_played_value = None
            s.highest_played_index = None
        return rank

    def calc_position_index(self, s: GameState) -> int:
        """Number of seats that already played to the open trick (0 when none is open)."""
        if s.highest_played_value is None:
            return 0
        n = len(s.players[s.player_index].cards)
        return sum(1 for p in s.players if len(p.cards) < n)

    def is_endgame(self, s: GameState) -> bool:
        return s.is_endgame()


def generate_random_game_state(seed: Seed, number_of_players: int, number_of_cards: int,
                               player_index: int = 0,
                               cards: Optional[Sequence[int]] = None) -> GameState:
    """Deal ``number_of_players`` hands of ``number_of_cards`` from the stream for ``seed``."""
    return CucumberEngine(number_of_players, number_of_cards, cards).reset(seed, player_index)
