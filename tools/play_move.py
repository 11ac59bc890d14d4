#!/usr/bin/env python3
"""
Ask a UCI engine for one move.

Usage:
    python tools/play_move.py /usr/bin/stockfish --moves e2e4 --movetime 100
    python tools/play_move.py --fen "<FEN>" --depth 12 --option "Skill Level=5"
"""

import argparse
import logging
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from uci_driver import EngineSession, PositionMode, SessionConfig, UCIError
from uci_driver.utils.logs import setup_logger


def parse_option_value(text: str):
    """Interpret "true"/"false" as bool and digits as int; anything else stays a string."""
    if text.lower() in ("true", "false"):
        return text.lower() == "true"
    try:
        return int(text)
    except ValueError:
        return text


def parse_option_args(pairs):
    """Turn ["Threads=2", "Ponder=false"] into a dict."""
    options = {}
    for pair in pairs:
        name, sep, value = pair.partition("=")
        if not sep:
            raise argparse.ArgumentTypeError(f"Expected NAME=VALUE, got: {pair}")
        options[name.strip()] = parse_option_value(value.strip())
    return options


def play_move(args) -> int:
    """Run one engine session and print the best move."""
    options = parse_option_args(args.option)
    if args.threads:
        options["Threads"] = args.threads

    config = SessionConfig(
        engine_path=Path(args.engine) if args.engine else None,
        read_timeout=args.timeout,
        options=options,
        debug=args.verbose,
        log_file=Path(args.log_file) if args.log_file else None,
    )
    setup_logger(debug=config.debug, log_file=config.log_file)

    with EngineSession.from_config(config) as session:
        meta = session.metadata
        print(f"Engine: {meta.name} by {meta.author} ({len(meta.options)} options)")

        if not session.is_ready():
            print("Error: engine did not confirm readiness")
            return 1

        if args.fen:
            session.new_game(PositionMode.FEN)
            session.advance_position(args.fen)
        else:
            session.new_game()
            for move in args.moves:
                session.advance_position(move)

        result = session.search(movetime=args.movetime, depth=args.depth)

    print(f"bestmove {result.best_move}" + (f" ponder {result.ponder_move}" if result.ponder_move else ""))
    return 0


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Ask a UCI chess engine for its best move",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    parser.add_argument(
        "engine",
        nargs="?",
        default=None,
        help="Path to the engine binary (default: auto-detect Stockfish)",
    )
    parser.add_argument(
        "--moves",
        nargs="*",
        default=[],
        help="Moves from the starting position in UCI notation",
    )
    parser.add_argument(
        "--fen",
        type=str,
        default=None,
        help="Search this position instead of --moves",
    )
    parser.add_argument(
        "--movetime",
        type=int,
        default=100,
        help="Search time in milliseconds",
    )
    parser.add_argument(
        "--depth",
        type=int,
        default=None,
        help="Maximum search depth",
    )
    parser.add_argument(
        "--threads",
        type=int,
        default=None,
        help="Value for the Threads option",
    )
    parser.add_argument(
        "--option",
        action="append",
        default=[],
        metavar="NAME=VALUE",
        help="Engine option to set (repeatable)",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Deadline in seconds for each engine response",
    )
    parser.add_argument(
        "--log-file",
        type=str,
        default=None,
        help="Write the log to this file instead of stderr",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Log every line exchanged with the engine",
    )

    args = parser.parse_args()

    try:
        sys.exit(play_move(args))
    except (UCIError, FileNotFoundError, argparse.ArgumentTypeError) as e:
        logging.getLogger("uci_driver").error(f"Failed: {e}")
        print(f"Error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
