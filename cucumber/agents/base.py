from __future__ import annotations
from typing import List, Optional, Protocol
from ..core.types import GameState

class Agent(Protocol):
    """A move policy: pick one of ``moves`` (hand indices) for the active seat."""
    def __call__(self, s: GameState, moves: List[int]) -> Optional[int]: ...
