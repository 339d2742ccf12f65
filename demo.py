#!/usr/bin/env python3
"""Watch the Logic player play confidential Minesweeper through the gateway."""
import os
import sys
import time
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent / "src"))

from minefield import ConfidentialMinesweeperEnv, MinesweeperConfig  # noqa: E402
from players import LogicPlayer  # noqa: E402


def clear_screen():
    os.system('cls' if os.name == 'nt' else 'clear')


def demo(delay: float = 0.3, games: int = 5, level: int = 0, gateway_ms: int = 200):
    """Run demo games with visualization."""
    config = MinesweeperConfig(gateway_interval_ms=gateway_ms)
    env = ConfidentialMinesweeperEnv(
        level=level,
        config=config,
        render_mode="ansi",
        poll_interval_s=gateway_ms / 4000,
        poll_retries=100,
    )
    player = LogicPlayer()
    rows, cols = env.rows, env.cols

    print(f"Board: {rows}x{cols}, level {level}, gateway delay {gateway_ms} ms")
    print("Starting in 2 seconds...")
    time.sleep(2)

    wins = 0

    for game in range(games):
        obs, _ = env.reset()
        player.reset()

        clear_screen()
        print(f"=== Game {game + 1}/{games} ===")
        print(f"Wins so far: {wins}\n")
        print(env.render())
        time.sleep(delay)

        done = False
        step = 0

        while not done:
            valid_actions = env.get_action_mask()
            action = player.select_action(obs, valid_actions)
            row, col = action // cols, action % cols

            obs, reward, terminated, truncated, info = env.step(action)
            done = terminated or truncated
            step += 1

            clear_screen()
            print(f"=== Game {game + 1}/{games} | Step {step} ===")
            print(f"Wins so far: {wins}")
            print(f"Last move: ({row}, {col})\n")
            print(env.render())

            if done:
                if info.get("game_state") == "WON":
                    wins += 1
                    print("\n*** WIN! ***")
                else:
                    print("\n*** LOST (hit bomb) ***")

            time.sleep(delay)

        time.sleep(1.0)  # Pause between games

    env.engine.gateway.join()
    print(f"\n=== Final: {wins}/{games} wins ({100*wins/games:.0f}%) ===")


if __name__ == "__main__":
    import argparse
    parser = argparse.ArgumentParser()
    parser.add_argument("--delay", type=float, default=0.3, help="Delay between moves")
    parser.add_argument("--games", type=int, default=5, help="Number of games")
    parser.add_argument("--level", type=int, default=0, help="Game level (0, 1, 2)")
    parser.add_argument("--gateway-ms", type=int, default=200, help="Gateway delay in ms")
    args = parser.parse_args()

    demo(delay=args.delay, games=args.games, level=args.level, gateway_ms=args.gateway_ms)
