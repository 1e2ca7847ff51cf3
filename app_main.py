"""Application entry point for the QuizReel API."""

from __future__ import annotations

from quiz_reel.constants.network_constants import DEFAULT_HOST, DEFAULT_PORT
from quiz_reel.core.quiz_manager import QuizManager
from quiz_reel.server.api_server import run_api_server
from quiz_reel.utils.logging_config import configure_logging


def main() -> None:
    """Initialize logging and serve the API."""
    logger = configure_logging()
    logger.info("Starting QuizReel API on %s:%d", DEFAULT_HOST, DEFAULT_PORT)

    quiz_manager = QuizManager()
    run_api_server(quiz_manager=quiz_manager, host=DEFAULT_HOST, port=DEFAULT_PORT)


if __name__ == "__main__":
    main()
