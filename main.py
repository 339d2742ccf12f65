#!/usr/bin/env python3
"""
Confidential Minesweeper - Main entry point.

Usage:
    python main.py board [--level L] [--counter N] [--row R --col C]
    python main.py default-board
    python main.py density [--games N]
    python main.py play [--player {random,logic}] [--games N] [--custom]
    python main.py infos --cells 16 17 18 [--level L]
"""
import argparse
import logging
import sys
from pathlib import Path

# Add src to path when running from a checkout
sys.path.insert(0, str(Path(__file__).parent / "src"))

from minefield import (  # noqa: E402
    SYNCHRONOUS,
    BoardGenerator,
    ConfidentialMinesweeper,
    ConfidentialMinesweeperEnv,
    compute_clue_solution,
    compute_density,
    compute_deterministic_board,
    default_board,
)
from minefield.clues import row_col_to_cell  # noqa: E402
from minefield.render import render_board, render_cache, render_values  # noqa: E402
from mockfhe import MinesweeperError  # noqa: E402
from players import LogicPlayer, RandomPlayer  # noqa: E402


logger = logging.getLogger("minesweeper")


def print_board(board: int) -> None:
    """Print a board, its clues and its density."""
    print("Bombs:")
    print(render_board(board))
    print("\nClues:")
    print(render_values(compute_clue_solution(board)))
    print(f"\nBoard: {hex(board)}")
    print(f"Density: {compute_density(board):.1f}%")


def board(args: argparse.Namespace) -> None:
    """Print a deterministic board."""
    first_cell = row_col_to_cell(args.row, args.col)
    print(f"Level {args.level}, game #{args.counter}, first cell ({args.row}, {args.col})\n")
    print_board(compute_deterministic_board(args.level, args.counter, first_cell))


def print_default_board(args: argparse.Namespace) -> None:
    """Print the built-in custom board."""
    print_board(default_board())


def density(args: argparse.Namespace) -> None:
    """Print the average bomb density of each level."""
    print(f"Average density over {args.games} games:")
    for level in range(3):
        generator = BoardGenerator()
        total = sum(
            compute_density(generator.next_board(level, args.first_cell))
            for _ in range(args.games)
        )
        print(f"  Level {level}: {total / args.games:.2f}%")


def play(args: argparse.Namespace) -> None:
    """Let a player play several games through the environment."""
    env = ConfidentialMinesweeperEnv(level=args.level, render_mode="ansi")
    if args.player == "random":
        player = RandomPlayer(seed=args.seed)
    else:
        player = LogicPlayer(seed=args.seed)

    options = {"board": default_board(), "first_cell": 0} if args.custom else None

    wins = 0
    total_steps = 0
    for game in range(args.games):
        obs, info = env.reset(seed=args.seed + game, options=options)
        player.reset()
        done = False

        while not done:
            action = player.select_action(obs, env.get_action_mask())
            obs, reward, terminated, truncated, info = env.step(action)
            done = terminated or truncated

        total_steps += info["steps"]
        if info["game_state"] == "WON":
            wins += 1
        logger.info("Game %d: %s after %d steps", game + 1, info["game_state"], info["steps"])

        if args.verbose:
            print(env.render())
            print()

    print(f"Results for {args.player} player:")
    print(f"  Win rate: {wins / args.games:.1%}")
    print(f"  Avg steps: {total_steps / args.games:.1f}")


def infos(args: argparse.Namespace) -> None:
    """Play a fixed sequence of cells and print the game infos."""
    engine = ConfidentialMinesweeper(SYNCHRONOUS)
    player = "cli"

    first_cell = args.cells[0]
    if args.custom:
        engine.new_custom_game(player, first_cell, default_board())
    else:
        engine.new_game(player, args.level, first_cell)

    for cell_index in args.cells:
        try:
            engine.reveal_cell(player, cell_index)
        except MinesweeperError as exc:
            print(f"Cell {cell_index}: {exc}")
            break

    pending = engine.pending_decryption_request(player)
    print(f"Level: {engine.level_of(player)}")
    print(f"First cell: {first_cell}")
    print(f"Victory: {engine.is_it_a_victory(player)}")
    print(f"Game over: {engine.is_it_game_over(player)}")
    print(f"Pending cell: {pending.cell_index_plus_one - 1 if pending.cell_index_plus_one else '-'}")
    print()
    print(render_cache(engine.get_clear_cache_fields(player), color=args.color))


def main() -> None:
    """Parse arguments and run the appropriate command."""
    parser = argparse.ArgumentParser(
        description="Confidential Minesweeper - boards, clues and players"
    )
    parser.add_argument(
        "--log-level", default="WARNING", help="Logging level (DEBUG, INFO, ...)"
    )
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # Board command
    board_parser = subparsers.add_parser("board", help="Print a deterministic board")
    board_parser.add_argument("--level", type=int, default=0, help="Game level (0, 1, 2)")
    board_parser.add_argument("--counter", type=int, default=0, help="Game counter")
    board_parser.add_argument("--row", type=int, default=1, help="First cell row")
    board_parser.add_argument("--col", type=int, default=5, help="First cell column")

    # Default board command
    subparsers.add_parser("default-board", help="Print the built-in custom board")

    # Density command
    density_parser = subparsers.add_parser("density", help="Average density per level")
    density_parser.add_argument(
        "--games", type=int, default=50, help="Number of boards per level"
    )
    density_parser.add_argument(
        "--first-cell", type=int, default=0, help="First cell of every board"
    )

    # Play command
    play_parser = subparsers.add_parser("play", help="Let a player play games")
    play_parser.add_argument(
        "--player",
        choices=["random", "logic"],
        default="logic",
        help="Player to use",
    )
    play_parser.add_argument("--games", type=int, default=10, help="Number of games")
    play_parser.add_argument("--level", type=int, default=0, help="Game level (0, 1, 2)")
    play_parser.add_argument("--seed", type=int, default=0, help="Random seed")
    play_parser.add_argument(
        "--custom", action="store_true", help="Play the built-in custom board"
    )
    play_parser.add_argument(
        "--verbose", action="store_true", help="Print every final board"
    )

    # Infos command
    infos_parser = subparsers.add_parser("infos", help="Play cells and print game infos")
    infos_parser.add_argument(
        "--cells", type=int, nargs="+", required=True, help="Cells to reveal in order"
    )
    infos_parser.add_argument("--level", type=int, default=0, help="Game level (0, 1, 2)")
    infos_parser.add_argument(
        "--custom", action="store_true", help="Play the built-in custom board"
    )
    infos_parser.add_argument("--color", action="store_true", help="ANSI colours")

    args = parser.parse_args()
    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "board":
        board(args)
    elif args.command == "default-board":
        print_default_board(args)
    elif args.command == "density":
        density(args)
    elif args.command == "play":
        play(args)
    elif args.command == "infos":
        infos(args)
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
