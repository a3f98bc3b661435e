"""
Chirpy Server Entry Point

Allows running the server directly via `python -m chirpy_server`.
Loads .env, configures logging to stderr and starts the server.
"""

import argparse
import asyncio
import logging
import sys

from dotenv import load_dotenv

from .core.chirpy_server import ChirpyServer
from .core.config import ConfigError, ServerConfig


def setup_logging(level: str = "INFO"):
    """Configure logging to stderr"""
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        stream=sys.stderr
    )


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="chirpy_server", description="Chirpy HTTP server")
    parser.add_argument("--debug", action="store_true", help="Delete the database before starting")
    parser.add_argument("--host", help="Bind address (overrides CHIRPY_HOST)")
    parser.add_argument("--port", type=int, help="Bind port (overrides CHIRPY_PORT)")
    parser.add_argument("--db-path", help="Database file (overrides CHIRPY_DB_PATH)")
    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> ServerConfig:
    """Environment configuration with command line overrides"""
    config = ServerConfig.from_env()
    if args.host:
        config.host = args.host
    if args.port:
        config.port = args.port
    if args.db_path:
        config.db_path = args.db_path
    config.reset_database = args.debug
    return config


async def main(config: ServerConfig):
    """Main entry point"""
    logger = logging.getLogger("main")

    try:
        server = ChirpyServer(config)
        logger.info(f"Starting Chirpy Server on {config.host}:{config.port}...")
        await server.run()

    except Exception as e:
        logger.critical(f"Fatal error: {e}", exc_info=True)
        sys.exit(1)


def cli(argv=None):
    """Console entry point"""
    load_dotenv()
    arguments = parse_args(argv)
    try:
        server_config = build_config(arguments)
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        sys.exit(2)

    setup_logging(server_config.log_level)
    try:
        asyncio.run(main(server_config))
    except KeyboardInterrupt:
        sys.exit(0)


if __name__ == "__main__":
    cli()
