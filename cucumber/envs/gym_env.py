from __future__ import annotations
import logging
from io import StringIO
from typing import Any, List, Optional
import numpy as np
import gymnasium as gym
from gymnasium import spaces
from ..core.cards import NUM_RANKS, card_value
from ..core.engine import CucumberEngine
from ..core.rng import random_number_generator
from ..core.types import GameState
from ..core.valuation import valuate_static
from ..agents.random_policy import RandomPolicy

logger = logging.getLogger(__name__)

class CucumberGymEnv(gym.Env):
    """
    A Gym environment for one seat of a Cucumber table.

    The hero seat is controlled by the learner; every other seat plays with a
    ``RandomPolicy``.  An episode is one round of tricks, from the deal down to
    one card per hand.

    Parameters (``config`` dict or keyword arguments):
        hero_seat (int): Seat controlled by the learner. Default 0.
        num_players (int): Seats at the table. Default 3.
        num_cards (int): Cards dealt per seat. Default 3.
        seed (str | int): Seed for dealing and opponents. Default "0".
        render_mode (Optional[str]): "ansi" or None.

    Attributes:
        Observation_Space Dict:

            - hand: Box(13,) - Hero's cards counted per rank
            - trick: Discrete(14) - Winning rank of the open trick + 1 (0 = no trick)
            - hand_sizes: Box(num_players,) - Cards left per seat
            - position: Discrete(num_players) - Seats that already played to the trick
            - action_mask: MultiBinary(num_cards) - Legal hand indices

        Action_Space: Discrete(num_cards), an index into the hero's sorted hand.

    Notes:
        - Opponents are played automatically until it is the hero's turn with
          a real choice or the round is over; forced moves of the hero are
          played automatically as well
        - The reward is 0 until the end, then the hero's cross-scored static
          valuation (higher is better)
    """

    metadata = {"render_modes": ["ansi", None], "name": "Cucumber-v0"}

    def __init__(self, config: Optional[dict] = None, **kwargs: Any):
        cfg = {}
        if config is not None:
            cfg.update(dict(config))
        if kwargs:
            cfg.update(kwargs)

        self.render_mode = cfg.get("render_mode", None)
        self.hero = int(cfg.get("hero_seat", 0))
        num_players = int(cfg.get("num_players", 3))
        num_cards = int(cfg.get("num_cards", 3))
        if not 0 <= self.hero < num_players:
            raise ValueError(f"hero_seat {self.hero} out of range for {num_players} players")
        self.seed_str = str(cfg.get("seed", "0"))
        self.engine = CucumberEngine(num_players=num_players, num_cards=num_cards)
        self._episode = 0
        self._rng = random_number_generator(self.seed_str)
        self.opponent = RandomPolicy(self._rng)
        self._state: Optional[GameState] = None

        self.observation_space = spaces.Dict({
            "hand":        spaces.Box(low=0, high=4, shape=(NUM_RANKS,), dtype=np.int32),
            "trick":       spaces.Discrete(NUM_RANKS + 1),
            "hand_sizes":  spaces.Box(low=0, high=num_cards, shape=(num_players,), dtype=np.int32),
            "position":    spaces.Discrete(num_players),
            "action_mask": spaces.MultiBinary(num_cards),
        })
        self.action_space = spaces.Discrete(num_cards)

    def reset(self, *, seed: Optional[int] = None, options: Optional[dict] = None):
        """
        Deal a new round.

        Args:
            seed (Optional[int]): If given, restarts the seed sequence from it.
            options (Optional[dict]): Unused.

        Returns:
            tuple: ``(obs, info)``; ``info["terminal_reward"]`` is set if the
            round finished without the hero ever having a choice.
        """
        super().reset(seed=seed)
        if seed is not None:
            self.seed_str = str(seed)
            self._episode = 0
            self._rng = random_number_generator(self.seed_str)
            self.opponent = RandomPolicy(self._rng)
        self._state = self.engine.reset(f"{self.seed_str}:{self._episode}")
        self._episode += 1
        info = {}
        if self._auto_to_hero_or_terminal():
            info["terminal_reward"] = self._reward()
        return self._obs(), info

    def step(self, action: int):
        """
        Play the hero's card at hand index ``action``.

        Returns:
            tuple: ``(obs, reward, terminated, truncated, info)``.

        Raises:
            ValueError: If ``action`` is not a legal move.
        """
        assert self._state is not None, "call reset() first"
        s = self._state
        assert s.player_index == self.hero
        moves = self.engine.possible_moves(s)
        action = int(action)
        if action not in moves:
            raise ValueError(f"illegal action {action}, legal: {moves}")
        self.engine.play_card(s, action)
        if self._auto_to_hero_or_terminal():
            reward = self._reward()
            return self._obs(), reward, True, False, {"hands": s.to_string()}
        return self._obs(), 0.0, False, False, {}

    def render(self):
        assert self._state is not None
        buf = StringIO()
        buf.write(self._state.to_string(simple=False) + "\n")
        return buf.getvalue()

    # helpers
    def _auto_to_hero_or_terminal(self) -> bool:
        assert self._state is not None
        s = self._state
        while True:
            moves = self.engine.possible_moves(s)
            if not moves:
                return True
            if s.player_index == self.hero and len(moves) > 1:
                return False
            m = moves[0] if len(moves) == 1 else self.opponent(s, moves)
            self.engine.play_card(s, m)

    def _reward(self) -> float:
        assert self._state is not None
        reward = float(valuate_static(self._state, self.hero, include_other_players=True))
        logger.debug("round over %s reward=%s", self._state.to_string(), reward)
        return reward

    def _obs(self):
        assert self._state is not None
        s = self._state
        hand = np.zeros(NUM_RANKS, dtype=np.int32)
        for c in s.players[self.hero].cards:
            hand[card_value(c)] += 1
        trick = 0 if s.highest_played_value is None else s.highest_played_value + 1
        sizes = np.array([len(p.cards) for p in s.players], dtype=np.int32)
        return {
            "hand": hand,
            "trick": np.int64(trick),
            "hand_sizes": sizes,
            "position": np.int64(self.engine.calc_position_index(s)),
            "action_mask": self._action_mask(),
        }

    def _action_mask(self):
        s = self._state
        mask = np.zeros(self.action_space.n, dtype=np.int8)
        if s is None or s.player_index != self.hero: return mask
        moves: List[int] = self.engine.possible_moves(s)
        for m in moves:
            mask[m] = 1
        return mask


if __name__ == "__main__":
    env = CucumberGymEnv(hero_seat=0, seed=42)
    env.reset()
    print(env.render())
