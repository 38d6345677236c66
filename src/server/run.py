"""CLI entry point for launching the FastAPI app with uvicorn."""

import argparse

import uvicorn

from src.work_record import Config
from src.work_record.logger import setup_logger

from .app import create_app


def main() -> None:
    """Run the API server."""
    parser = argparse.ArgumentParser(description="Work Record API server")
    parser.add_argument("--host", default="127.0.0.1", help="Host to bind (default: 127.0.0.1)")
    parser.add_argument("--port", type=int, default=8000, help="Port to bind (default: 8000)")
    parser.add_argument("--config", help="Path to YAML config")
    args = parser.parse_args()

    config = Config.load(args.config)
    setup_logger(log_level=config.log_level, log_file=config.log_file)
    config.ensure_dirs()

    uvicorn.run(create_app(config), host=args.host, port=args.port)


if __name__ == "__main__":
    main()
