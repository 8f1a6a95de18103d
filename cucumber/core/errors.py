# cucumber/core/errors.py
from __future__ import annotations


class CucumberError(Exception):
    """Base class for errors raised by the Cucumber engine."""


class InvalidCardError(CucumberError, ValueError):
    """A card symbol outside ``23456789TJQKA``."""


class DeckExhaustedError(CucumberError, RuntimeError):
    """Drawing from a deck with no undrawn cards left."""


class NotEndgameError(CucumberError, ValueError):
    """Static valuation asked for a state where some hand is not a single card."""


class PolicyRequiredError(CucumberError, RuntimeError):
    """A rollout reached a decision with several legal moves and no policy."""


class PolicyError(CucumberError, RuntimeError):
    """A policy returned nothing, or a move that was not offered to it."""
