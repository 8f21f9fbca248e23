"""Main application entry point."""

import argparse
import logging

import uvicorn
from dotenv import load_dotenv

from src.services.logging import setup_server_logging

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)


def main():
    """Main entry point."""
    from src.services.config import load_config

    parser = argparse.ArgumentParser(description="Rent Ledger API")
    parser.add_argument("--host", default="0.0.0.0", help="Host to bind to")
    parser.add_argument("--port", type=int, default=8000, help="Port to bind to")
    args = parser.parse_args()

    config = load_config()
    setup_server_logging(config.log_file)
    logger.info("Starting Rent Ledger API on %s:%d (billing timezone %s)", args.host, args.port, config.billing_timezone)

    # Imported after logging is configured so module-level loggers pick it up
    from src.api.app import app

    uvicorn.run(app, host=args.host, port=args.port, log_level="info")


if __name__ == "__main__":
    main()
