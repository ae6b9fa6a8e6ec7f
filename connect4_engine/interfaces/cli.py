"""
cli.py - Command-line interface for the Connect Four engine

This module provides a terminal front end that plays games through a
GameSession, inspects board positions, and benchmarks the engine.
"""

import argparse
import sys
import time
from typing import List, Optional

import numpy as np

from connect4_engine.ai.opponent import OpponentPolicy
from connect4_engine.debug import DebugLevel, debug
from connect4_engine.game.board import Board
from connect4_engine.game.events import EventType, GameEvent
from connect4_engine.game.rules import RuleEngine
from connect4_engine.game.win_detector import check_win
from connect4_engine.scheduling import ManualScheduler
from connect4_engine.session import GameMode, GameSession
from connect4_engine.utils import COLS, ROWS, DEFAULT_THINK_DELAY, Player

QUIT, RESTART, SWITCH_MODE = "q", "r", "m"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Connect Four CLI')
    parser.add_argument('--debug', action='store_true', help='Enable debug logging')
    parser.add_argument('--debug-level', default='warning',
                        choices=[level.name.lower() for level in DebugLevel],
                        help='Logging level (ignored with --debug)')
    parser.add_argument('--log-file', default=None, help='Also write logs to this file')

    subparsers = parser.add_subparsers(dest='command', help='Command to run')

    play_parser = subparsers.add_parser('play', help='Play a game interactively')
    play_parser.add_argument('--mode', choices=[m.value for m in GameMode],
                             default=GameMode.HUMAN_VS_OPPONENT.value,
                             help='hvh for two humans, hvo to play the AI')
    play_parser.add_argument('--seed', type=int, default=None, help='Seed for the AI')
    play_parser.add_argument('--think-delay', type=float, default=DEFAULT_THINK_DELAY[0],
                             help='Seconds the AI waits before moving')

    position_parser = subparsers.add_parser('position', help='Inspect a board position')
    position_parser.add_argument('--position', type=str, required=True,
                                 help=f'{ROWS * COLS} comma separated cell values (0, 1, 2), top row first')
    position_parser.add_argument('--seed', type=int, default=None, help='Seed for the AI')

    benchmark_parser = subparsers.add_parser('benchmark', help='Benchmark performance')
    benchmark_parser.add_argument('--iterations', type=int, default=1000,
                                  help='Number of iterations for benchmarking')
    return parser


def configure_debug(args: argparse.Namespace) -> None:
    """Apply the logging flags shared by every command."""
    if args.debug:
        debug.configure(level=DebugLevel.DEBUG)
    else:
        debug.set_from_string(args.debug_level)
    if args.log_file:
        debug.configure(log_file=args.log_file)


def parse_position(text: str) -> Board:
    """Parse a comma separated grid into a Board (raises ValueError on bad input)."""
    values = [int(c) for c in text.replace(' ', '').split(',') if c]
    if len(values) != ROWS * COLS:
        raise ValueError(f"Position string must have {ROWS * COLS} values, got {len(values)}")
    return Board.from_grid(np.array(values).reshape(ROWS, COLS))


class SimpleCLI:
    """Simple command-line interface for Connect Four."""

    def __init__(self, argv: Optional[List[str]] = None):
        self.args = build_parser().parse_args(argv)
        self.session: Optional[GameSession] = None
        self.scheduler = ManualScheduler()

    def run(self) -> int:
        """Run the selected command and return an exit code."""
        configure_debug(self.args)

        if self.args.command == 'play':
            self.play_game()
        elif self.args.command == 'position':
            return self.inspect_position()
        elif self.args.command == 'benchmark':
            self.benchmark()
        else:
            print("Please specify a command. Use --help for options.")
            return 1
        return 0

    # ---- play ----

    def on_event(self, event: GameEvent) -> None:
        """Print session notifications."""
        name = self.session.player_name
        if event.kind == EventType.DISC_PLACED:
            print(f"{name(event.side)} plays column {event.column}")
            print(self.session.board.render())
        elif event.kind == EventType.TURN_CHANGED:
            print(f"{name(event.side)}'s turn")
        elif event.kind == EventType.OPPONENT_THINKING_STARTED:
            print("AI is thinking...")
        elif event.kind == EventType.GAME_WON:
            print(f"{name(event.side)} wins! Winning run: {list(event.winning_run)}")
        elif event.kind == EventType.GAME_DRAW:
            print("It's a draw!")

    def play_game(self) -> None:
        """Play a Connect Four game interactively."""
        delay = max(0.0, self.args.think_delay)
        self.session = GameSession(mode=GameMode(self.args.mode),
                                   policy=OpponentPolicy(seed=self.args.seed),
                                   scheduler=self.scheduler,
                                   think_delay=(delay, delay))
        self.session.subscribe(self.on_event)

        print("Starting a new Connect Four game!")
        print(f"Enter column number (0-{COLS - 1}) to make a move.")
        print(f"Other commands: '{QUIT}' to quit, '{RESTART}' to restart, '{SWITCH_MODE}' to switch mode.")
        print(self.session.board.render())

        try:
            while True:
                if self.session.opponent_thinking:
                    time.sleep(self.scheduler.next_delay() or 0.0)
                    self.scheduler.run_pending()
                    continue

                if self.session.result.is_game_over():
                    print("Game over!")
                    command = self.prompt(f"'{RESTART}' to play again, anything else to quit: ")
                    if command != RESTART:
                        return
                    self.session.new_game()
                    print(self.session.board.render())
                    continue

                command = self.prompt(f"{self.session.player_name(self.session.side_to_move)}, "
                                      f"your move (0-{COLS - 1}, {QUIT}/{RESTART}/{SWITCH_MODE}): ")
                if command == QUIT:
                    print("Quitting game.")
                    return
                if command == RESTART:
                    self.session.new_game()
                    print("Game restarted.")
                    print(self.session.board.render())
                    continue
                if command == SWITCH_MODE:
                    other = (GameMode.HUMAN_VS_HUMAN
                             if self.session.mode == GameMode.HUMAN_VS_OPPONENT
                             else GameMode.HUMAN_VS_OPPONENT)
                    self.session.set_mode(other)
                    print(f"Switched to {other.name}.")
                    print(self.session.board.render())
                    continue

                column = self.parse_column(command)
                if column is None:
                    continue
                outcome = self.session.request_move(column)
                if not outcome:
                    print(f"Column {column} is not playable ({outcome.rejection.name.lower()}).")
        finally:
            self.session.close()

    def prompt(self, text: str) -> str:
        try:
            return input(text).strip().lower()
        except EOFError:
            return QUIT

    @staticmethod
    def parse_column(text: str) -> Optional[int]:
        try:
            column = int(text)
        except ValueError:
            print("Invalid input. Please enter a column number or command.")
            return None
        if not 0 <= column < COLS:
            print(f"Column must be between 0 and {COLS - 1}.")
            return None
        return column

    # ---- position ----

    def inspect_position(self) -> int:
        """Load a position, report wins and valid moves, and ask the AI for a move."""
        try:
            board = parse_position(self.args.position)
        except ValueError as e:
            print(f"Error parsing position: {e}")
            return 1

        print("Loaded position:")
        print(board.render())

        wins = set()
        for row in range(ROWS):
            for col in range(COLS):
                side = board.cell(row, col)
                if side != Player.EMPTY:
                    run = check_win(board, row, col, side)
                    if run is not None:
                        wins.add((side, run.cells))
        if wins:
            for side, cells in sorted(wins, key=lambda w: (w[0].value, w[1])):
                print(f"Win for {side.name} along {list(cells)}")
        else:
            print("No win detected for any player")

        if board.is_full():
            print("Board is full")
        else:
            print(f"Empty spaces: {ROWS * COLS - board.disc_count}")
            print(f"Valid moves: {board.available_columns()}")
            # Side to move follows from the disc counts under alternating play
            ones = int(np.count_nonzero(board.grid == Player.ONE.value))
            twos = int(np.count_nonzero(board.grid == Player.TWO.value))
            side = Player.ONE if ones == twos else Player.TWO
            policy = OpponentPolicy(seed=self.args.seed)
            column = policy.choose_column(board, side)
            print(f"AI suggestion for {side.name}: column {column} ({policy.last_reason})")
        return 0

    # ---- benchmark ----

    def benchmark(self) -> None:
        """Benchmark board creation, random games, win checks and AI decisions."""
        iterations = max(1, self.args.iterations)
        rng = np.random.default_rng(0)
        print(f"Running benchmark with {iterations} iterations...")

        debug.start_timer("board_init")
        for _ in range(iterations):
            Board()
        elapsed = debug.end_timer("board_init")
        print(f"Board initialization: {elapsed:.6f} seconds total, "
              f"{elapsed / iterations * 1000:.6f} ms per board")

        games = max(1, iterations // 10)
        total_moves = 0
        debug.start_timer("random_games")
        for _ in range(games):
            engine = RuleEngine()
            while not engine.is_game_over():
                engine.apply_move(int(rng.choice(engine.get_valid_moves())))
                total_moves += 1
        elapsed = debug.end_timer("random_games")
        print(f"Played {games} random games with {total_moves} moves: "
              f"{elapsed:.6f} seconds total, {elapsed / total_moves * 1000:.6f} ms per move")

        board = Board()
        for col in (3, 3, 2, 4, 2, 5, 1):
            board.place(board.drop_height(col), col, Player.ONE if col % 2 else Player.TWO)
        checks = 0
        debug.start_timer("win_check")
        for _ in range(iterations):
            for row in range(ROWS):
                for col in range(COLS):
                    side = board.cell(row, col)
                    if side != Player.EMPTY:
                        check_win(board, row, col, side)
                        checks += 1
        elapsed = debug.end_timer("win_check")
        print(f"Performing {checks} win checks: {elapsed:.6f} seconds total, "
              f"{elapsed / checks * 1000:.6f} ms per check")

        policy = OpponentPolicy(seed=0)
        debug.start_timer("ai_decisions")
        for _ in range(iterations):
            policy.choose_column(board, Player.TWO)
        elapsed = debug.end_timer("ai_decisions")
        print(f"Making {iterations} AI decisions: {elapsed:.6f} seconds total, "
              f"{elapsed / iterations * 1000:.6f} ms per decision")


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the CLI."""
    return SimpleCLI(argv).run()


if __name__ == "__main__":
    sys.exit(main())
