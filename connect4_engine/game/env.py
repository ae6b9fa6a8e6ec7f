"""
env.py - Gymnasium environment for Connect Four against the heuristic opponent

The agent always plays Player.ONE. After every accepted agent move the
OpponentPolicy answers immediately as Player.TWO, so each step covers one
full round. No learning happens in this package; the environment only lets
external agents play against the engine through the Gymnasium interface.
"""

from typing import Dict, Optional, Tuple

import gymnasium as gym
import numpy as np
from gymnasium import spaces

from connect4_engine.ai.opponent import OpponentPolicy
from connect4_engine.debug import debug
from connect4_engine.game.rules import RuleEngine
from connect4_engine.utils import COLS, ROWS, GameResult, Player

AGENT_SIDE = Player.ONE


class ConnectFourEnv(gym.Env):
    """
    Connect Four environment following the Gymnasium interface.
    """

    metadata = {'render_modes': ['ascii', 'human'], 'render_fps': 4}

    def __init__(self, render_mode: Optional[str] = None):
        """
        Initialize the environment.

        Args:
            render_mode: None, 'ascii' (render returns a string) or 'human' (prints)
        """
        if render_mode is not None and render_mode not in self.metadata['render_modes']:
            raise ValueError(f"Unsupported render mode: {render_mode}")

        self.action_space = spaces.Discrete(COLS)
        # 6x7 board with 3 possible values (0 empty, 1 agent, 2 opponent)
        self.observation_space = spaces.Box(low=0, high=2, shape=(ROWS, COLS), dtype=np.int8)

        self.render_mode = render_mode
        self.engine = RuleEngine()
        self.policy = OpponentPolicy()

        self.reward_win = 1.0
        self.reward_lose = -1.0
        self.reward_draw = 0.1
        self.reward_invalid_move = -0.5
        self.reward_step = -0.01

    def reset(self, seed: Optional[int] = None,
              options: Optional[Dict] = None) -> Tuple[np.ndarray, Dict]:
        """
        Start a new game.

        Args:
            seed: Seeds the environment generator, which the opponent draws from
            options: Unused

        Returns:
            Initial observation and info dictionary
        """
        super().reset(seed=seed)
        self.engine = RuleEngine()
        self.policy = OpponentPolicy(rng=self.np_random)
        debug.debug("Environment reset", "env")

        if self.render_mode == "human":
            self.render()
        return self._get_observation(), self._get_info()

    def step(self, action: int) -> Tuple[np.ndarray, float, bool, bool, Dict]:
        """
        Play the agent's column and the opponent's reply.

        Returns:
            Tuple of (observation, reward, terminated, truncated, info)
        """
        outcome = self.engine.apply_move(int(action))
        if not outcome:
            debug.warning(f"Invalid action {action}: {outcome.rejection.name}", "env")
            info = self._get_info()
            info['invalid_move'] = True
            return self._get_observation(), self.reward_invalid_move, False, True, info

        if not self.engine.is_game_over():
            column = self.policy.choose_column(self.engine.board, AGENT_SIDE.other(), AGENT_SIDE)
            self.engine.apply_move(column)

        reward = self.reward_step
        terminated = self.engine.is_game_over()
        if self.engine.result == GameResult.WIN:
            reward = self.reward_win if self.engine.winner == AGENT_SIDE else self.reward_lose
        elif self.engine.result == GameResult.DRAW:
            reward = self.reward_draw
        if terminated:
            debug.info(f"Episode over: {self.engine.result.name}", "env")

        if self.render_mode == "human":
            self.render()
        return self._get_observation(), reward, terminated, False, self._get_info()

    def render(self) -> Optional[str]:
        if self.render_mode == "ascii":
            return self.engine.render()
        if self.render_mode == "human":
            print(self.engine.render())
        return None

    def _get_observation(self) -> np.ndarray:
        return self.engine.board.get_state().astype(np.int8)

    def _get_info(self) -> Dict:
        valid_moves = self.engine.get_valid_moves()
        run = self.engine.winning_run
        return {
            'valid_moves': valid_moves,
            'num_valid_moves': len(valid_moves),
            'current_player': self.engine.side_to_move.value,
            'game_result': self.engine.result.name,
            'winner': self.engine.winner.value if self.engine.winner else None,
            'moves_made': len(self.engine.moves_made),
            'winning_line': list(run) if run else [],
            'last_move': self.engine.last_move,
        }
