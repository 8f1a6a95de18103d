import sys
from pathlib import Path

# Ensure the repository root is on sys.path so `cucumber` can be imported when
# the project is not installed as a package.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import pytest

from cucumber.core.cards import cards_from_string, make_deck
from cucumber.core.engine import CucumberEngine
from cucumber.core.types import Deck, GameState, Player


def state_from_hands(hands: str, player_index: int = 0) -> GameState:
    """Build a table from comma-separated rank strings, one suit per repeated rank."""
    players = []
    used = set()
    for hand in hands.split(","):
        cards = []
        for rank in cards_from_string(hand):
            c = rank
            while c in used:
                c += 13
            used.add(c)
            cards.append(c)
        players.append(Player(cards))
    return GameState(Deck(), players, player_index)


def play_last_moves(eng: CucumberEngine, s: GameState, n: int) -> None:
    for _ in range(n):
        s_moves = eng.possible_moves(s)
        eng.play_card(s, s_moves[-1])


@pytest.fixture
def engine() -> CucumberEngine:
    return CucumberEngine()


@pytest.fixture
def small_table():
    """3 players x 3 cards from a 20-card deck, after one round of last moves."""
    eng = CucumberEngine(3, 3, make_deck(20))
    s = eng.reset("123")
    play_last_moves(eng, s, 3)
    return eng, s
