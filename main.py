"""
Run a Mafia game server that players join from the browser.
"""

import argparse
import logging
import os

from dotenv import load_dotenv

from chatmafia.config.config_loader import load_config
from chatmafia.config.game_config import VALID_OPTIONS
from chatmafia.core.roles import SETUPS
from chatmafia.exceptions import ConfigurationError
from chatmafia.web import ChatServer

load_dotenv()

logger = logging.getLogger("chatmafia")


def main():
    """Entry point for running the chat server."""
    parser = argparse.ArgumentParser(
        description="Run a chat-mediated Mafia game server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py                                   # Default config, basic setup
  python main.py --config configs/default.yaml     # Use a YAML config
  python main.py --setup janitor --option daystart # Pick a setup and a game option
  python main.py --seed 42 --port 8000             # Reproducible role deal on port 8000
        """
    )
    parser.add_argument(
        "--config",
        "-c",
        type=str,
        default=None,
        help="Path to YAML configuration file (default: use default config)"
    )
    parser.add_argument(
        "--seed",
        "-s",
        type=int,
        default=None,
        help="Random seed for the role deal and death messages"
    )
    parser.add_argument(
        "--setup",
        type=str,
        choices=sorted(SETUPS),
        default=None,
        help="Named role setup to play (overrides the config file)"
    )
    parser.add_argument(
        "--option",
        "-o",
        action="append",
        choices=VALID_OPTIONS,
        default=None,
        help="Game option; may be repeated"
    )
    parser.add_argument("--host", type=str, default="127.0.0.1", help="Host to bind (default: 127.0.0.1)")
    parser.add_argument("--port", "-p", type=int, default=5000, help="Port to listen on (default: 5000)")

    args = parser.parse_args()

    config = load_config(args.config)
    if args.seed is not None:
        config.random_seed = args.seed
    if args.setup is not None:
        config.setup = args.setup
        config.roles = None
    if args.option:
        config.options = list(args.option)
    if not config.roles and not config.setup:
        config.setup = "basic"

    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    if config.random_seed is None:
        logger.info("No seed given, roles will be dealt at random")
    logger.info("Setup: %s, options: %s", config.setup or ", ".join(config.roles), config.options or "none")

    server = ChatServer(
        config=config,
        port=args.port,
        host=args.host,
        secret_key=os.getenv("MAFIA_SECRET_KEY"),
    )
    server.start()


if __name__ == "__main__":
    try:
        main()
    except ConfigurationError as e:
        raise SystemExit(f"Invalid configuration: {e}")
