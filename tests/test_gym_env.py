import numpy as np
import pytest

from cucumber.envs.gym_env import CucumberGymEnv


def _play_episode(env, seed=None):
    obs, info = env.reset(seed=seed)
    rewards = []
    if "terminal_reward" in info:
        return obs, [info["terminal_reward"]], []
    actions = []
    while True:
        assert env.observation_space.contains(obs)
        legal = np.flatnonzero(obs["action_mask"])
        assert len(legal) > 1
        a = int(legal[-1])
        actions.append(a)
        obs, r, terminated, truncated, info = env.step(a)
        rewards.append(r)
        assert not truncated
        if terminated:
            return obs, rewards, actions


@pytest.mark.parametrize("cfg", [
    {},
    {"num_players": 2, "num_cards": 4},
    {"num_players": 4, "num_cards": 5, "hero_seat": 3},
])
def test_episodes_terminate(cfg):
    env = CucumberGymEnv(cfg, seed="env")
    for _ in range(10):
        obs, rewards, _ = _play_episode(env)
        assert all(r == 0.0 for r in rewards[:-1])
        assert env.observation_space.contains(obs)
        assert all(s == 1 for s in obs["hand_sizes"])
        assert not obs["action_mask"].any()


def test_config_and_kwargs_merge():
    env = CucumberGymEnv({"num_players": 2, "hero_seat": 1}, num_players=4)
    assert env.engine.N == 4
    assert env.hero == 1
    assert env.observation_space["hand_sizes"].shape == (4,)


def test_hero_seat_out_of_range():
    with pytest.raises(ValueError):
        CucumberGymEnv(hero_seat=3)


def test_same_seed_same_episode():
    a = _play_episode(CucumberGymEnv(seed=5))
    b = _play_episode(CucumberGymEnv(seed=5))
    assert a[1] == b[1]
    assert a[2] == b[2]
    np.testing.assert_array_equal(a[0]["hand"], b[0]["hand"])


def test_illegal_action_raises():
    env = CucumberGymEnv(num_players=2, num_cards=5, seed="illegal")
    obs, info = env.reset()
    if "terminal_reward" in info:
        pytest.skip("round ended without a decision")
    with pytest.raises(ValueError):
        env.step(99)


def test_render_shows_table():
    env = CucumberGymEnv(render_mode="ansi", seed=1)
    env.reset()
    out = env.render()
    assert out.count("\n") == 3
    assert out.startswith("P1")
