"""
Turntree CLI - Command-line interface for the engine.

Usage:
    turntree games                         List built-in games
    turntree play <game>                   Play in the terminal
    turntree estimate <game> --moves 2,3   Replay moves, print estimates
    turntree serve                         Run the REST API
"""

import argparse
import logging
import sys

from .config import Settings

logger = logging.getLogger(__name__)

PLAY_HELP = (
    "Type an option to play it. "
    "'undo' (or 'Backspace') undoes, '?' estimates winners, "
    "'??' estimates moves, 'quit' exits."
)


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Turntree - Turn-Based Game Engine",
        prog="turntree",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    subparsers.add_parser("games", help="List built-in games")

    # Play command
    play_parser = subparsers.add_parser("play", help="Play a game in the terminal")
    play_parser.add_argument("game", help="Game id (see 'turntree games')")
    play_parser.add_argument("--seed", type=int, help="Seed for estimate rollouts")

    # Estimate command
    estimate_parser = subparsers.add_parser("estimate", help="Estimate odds after some moves")
    estimate_parser.add_argument("game", help="Game id")
    estimate_parser.add_argument("--moves", default="", help="Comma-separated moves to replay")
    estimate_parser.add_argument("--iterations", "-n", type=int, help="Rollouts (per option)")
    estimate_parser.add_argument("--seed", type=int, help="Seed for rollouts")

    # Serve command
    serve_parser = subparsers.add_parser("serve", help="Run the REST API")
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=8000)

    args = parser.parse_args(argv)
    settings = Settings.from_env()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "games":
        cmd_games(args)
    elif args.command == "play":
        cmd_play(args, settings)
    elif args.command == "estimate":
        cmd_estimate(args, settings)
    elif args.command == "serve":
        cmd_serve(args)
    else:
        parser.print_help()
        sys.exit(1)


def cmd_games(args):
    """List built-in games."""
    from .games import list_games

    for game in list_games():
        print(f"{game.game_id:<12} {game.name} ({game.min_players}-{game.max_players} players)")


def cmd_play(args, settings: Settings):
    """Interactive terminal session."""
    from .bots import RandomPolicy
    from .session import SessionManager, GameLoop, UNDO_KEY

    manager = SessionManager()
    session = manager.create_session(_load_game(args.game))
    loop = GameLoop(
        session,
        policy=RandomPolicy(seed=args.seed),
        max_rollout_steps=settings.max_rollout_steps,
    )

    print(PLAY_HELP)
    printed = _print_new_lines(session.transcript.lines, 0)

    while True:
        options = session.engine.waiting_options()
        if options:
            print(f"[options: {' '.join(str(o) for o in options)}]")

        try:
            key = input("> ").strip()
        except EOFError:
            break

        if key == "quit":
            break
        if key == "?":
            _print_winner_estimate(loop.estimate_winner(settings.winner_simulations))
            continue
        if key == "??":
            _print_option_estimate(loop.estimate_options(settings.option_simulations))
            continue

        result = loop.handle_key(UNDO_KEY if key == "undo" else key)
        if not result.applied:
            print("(ignored)")
            continue

        if len(result.lines) < printed:
            print("---- undo ----")
            printed = 0
        printed = _print_new_lines(result.lines, printed)

    manager.end_session(session.session_id, reason="user_ended")


def cmd_estimate(args, settings: Settings):
    """Replay moves, then print winner and per-move estimates."""
    from .bots import RandomPolicy
    from .session import SessionManager, GameLoop

    manager = SessionManager()
    session = manager.create_session(_load_game(args.game))
    loop = GameLoop(
        session,
        policy=RandomPolicy(seed=args.seed),
        max_rollout_steps=settings.max_rollout_steps,
    )

    moves = [m.strip() for m in args.moves.split(",") if m.strip()]
    logger.debug("Replaying %d moves in %s", len(moves), args.game)
    for move in moves:
        if not loop.submit(move).applied:
            print(f"Error: illegal move {move!r}")
            sys.exit(1)

    for line in session.transcript.lines:
        print(line)
    print()

    _print_winner_estimate(loop.estimate_winner(args.iterations or settings.winner_simulations))
    _print_option_estimate(loop.estimate_options(args.iterations or settings.option_simulations))


def cmd_serve(args):
    """Run the REST API with uvicorn."""
    import uvicorn

    uvicorn.run("turntree.api.app:app", host=args.host, port=args.port)


def _load_game(game_id: str):
    from .games import get_game

    try:
        return get_game(game_id)
    except ValueError as e:
        print(f"Error: {e}")
        sys.exit(1)


def _print_new_lines(lines: list[str], printed: int) -> int:
    for line in lines[printed:]:
        print(line)
    return len(lines)


def _print_winner_estimate(estimate):
    if estimate is None:
        print("Game inactive or over.")
        return
    if not estimate.wins:
        print("No winners (simulation inconclusive).")
        return
    for player, wins, probability in estimate.ranked():
        print(f"Player {player} Win Probability: {probability * 100:.1f}% ({wins} wins)")


def _print_option_estimate(estimate):
    if estimate is None:
        print("Not available (Setup phase or Game Over).")
        return
    print(f"Win Probability for Player {estimate.player} by Move:")
    for option, wins, probability in estimate.ranked():
        print(f"Move [{option}] -> Win Prob: {probability * 100:.1f}%")


if __name__ == "__main__":
    main()
