# cucumber/core/config.py
from __future__ import annotations
from dataclasses import dataclass, fields
from typing import Any, Mapping, Optional


@dataclass
class ValuationConfig:
    """
    Settings for Monte Carlo move valuation.

    Attributes:
        num_runs (int): Determinizations per move. Defaults to 1000.
        include_other_players (bool): Score relative to the other seats. Defaults to True.
        seed (str): Seed for the per-run substreams. Defaults to "0".
    """

    num_runs: int = 1000
    include_other_players: bool = True
    seed: str = "0"

    def __post_init__(self):
        self.num_runs = int(self.num_runs)
        self.include_other_players = bool(self.include_other_players)
        self.seed = str(self.seed)
        if self.num_runs < 0:
            raise ValueError(f"num_runs must be >= 0, got {self.num_runs}")

    @classmethod
    def from_dict(cls, config: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> "ValuationConfig":
        """Build from a dict-like config; keyword arguments override it, unknown keys are rejected."""
        cfg = {}
        if config is not None:
            cfg.update(dict(config))
        if kwargs:
            cfg.update(kwargs)
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(cfg) - known)
        if unknown:
            raise ValueError(f"unknown valuation settings: {', '.join(unknown)}")
        return cls(**cfg)
