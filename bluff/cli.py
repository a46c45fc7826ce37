"""
Bluff CLI - Command-line interface for the engine.

Usage:
    bluff simulate [--computers N] [--seed S]    Play an all-computer match
    bluff serve [--host H] [--port P]            Run the HTTP API
"""

import argparse
import logging
import sys

from . import config


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Bluff - card game rule engine",
        prog="bluff",
    )
    parser.add_argument(
        "--log-level",
        default=config.LOG_LEVEL,
        help="Logging level (default: %(default)s)",
    )
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Simulate command
    simulate_parser = subparsers.add_parser("simulate", help="Play an all-computer match")
    simulate_parser.add_argument("--computers", type=int, default=4, help="Number of computer players")
    simulate_parser.add_argument("--seed", type=int, default=config.RANDOM_SEED, help="Random seed")
    simulate_parser.add_argument(
        "--max-steps", type=int, default=config.MAX_SCRIPTED_STEPS,
        help="Stop after this many computer actions",
    )
    simulate_parser.add_argument(
        "--personality", default="classic",
        help="Computer play style: classic, trusting or suspicious",
    )

    # Serve command
    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", default="127.0.0.1", help="Bind address")
    serve_parser.add_argument("--port", type=int, default=8000, help="Port")

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "simulate":
        return cmd_simulate(args)
    elif args.command == "serve":
        return cmd_serve(args)
    else:
        parser.print_help()
        return 1


def cmd_simulate(args):
    """Play a match between computer participants and print the log."""
    from .bots import PERSONALITIES
    from .engine_core.rules import check_integrity, describe_entry
    from .session import SessionManager, run_scripted_turns

    personality = PERSONALITIES.get(args.personality.lower())
    if personality is None:
        print(f"Error: unknown personality {args.personality!r}")
        return 1
    if args.computers < 2:
        print("Error: need at least 2 computer players")
        return 1

    manager = SessionManager()
    session = manager.create_session(seed=args.seed, personality=personality)
    for _ in range(args.computers):
        session.add_scripted_participant()

    notice = session.start_game()
    if notice:
        print(f"Error: {notice.title}: {notice.description}")
        return 1

    print(f"Match {session.session_id} with {args.computers} computers (seed={args.seed})")
    result = run_scripted_turns(session, max_steps=args.max_steps)

    state = session.state
    for entry in state.action_history:
        print(f"  {describe_entry(state, entry)}")

    for error in result.errors:
        print(f"Error: {error}")

    problems = check_integrity(state)
    for problem in problems:
        print(f"Integrity: {problem}")

    if state.winner_id:
        winner = state.get_player(state.winner_id)
        print(f"\n{winner.name} wins after {result.steps} actions")
    else:
        print(f"\nNo winner after {result.steps} actions")
        print("Hands: " + ", ".join(f"{p.name}={p.hand_size}" for p in state.players))

    return 1 if problems or not result.success else 0


def cmd_serve(args):
    """Serve the HTTP API with uvicorn."""
    import uvicorn

    print(f"Serving Bluff API on http://{args.host}:{args.port} ({config.BLUFF_ENV})")
    uvicorn.run("bluff.api.app:app", host=args.host, port=args.port, log_level=args.log_level.lower())
    return 0


if __name__ == "__main__":
    sys.exit(main())
