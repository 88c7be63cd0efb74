#!/usr/bin/env python3
"""
Main entry point for the short link service.

The service runs as a single process: the table is loaded once and
every mutation is serialized by that process, so several workers would
each hold their own copy and overwrite one another.

Usage:
    python app.py

Environment variables:
    STORAGE_BACKEND - memory, file or redis
    STORAGE_PATH - Directory for the file backend
    REDIS_URL - Redis connection URL (redis backend)
    BASE_URL - Base URL for short links
    PORT - Port to listen on
    LOG_LEVEL - Logging level
    LOG_API_URL / LOG_API_TOKEN - Optional remote event log
"""

import signal
import sys
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from config import load_config
from shortlinks.common.logging_config import setup_logging
from shortlinks.factory import build_service
from shortlinks_web import create_app


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup and shutdown."""
    config = app.state.config
    logger = app.state.logger

    logger.info("Starting short link service...")
    logger.info(f"Using {config.storage_backend} storage")

    service = build_service(config, logger=logger)
    await service.store.open()
    app.state.service = service

    logger.info("Service started successfully")

    yield

    logger.info("Shutting down short link service...")
    await service.close()
    logger.info("Service stopped")


def main():
    """Main entry point."""
    config = load_config()

    logger = setup_logging(
        level=config.log_level,
        log_file=config.log_file,
        json_format=config.log_json,
    )

    logger.info("Short Link Service")
    logger.info(f"Configuration: {config.model_dump(exclude={'log_api_token', 'redis_url'})}")

    app = create_app(service=None, config=config, lifespan=lifespan)
    app.state.logger = logger

    uvicorn_config = uvicorn.Config(
        app,
        host=config.host,
        port=config.port,
        log_level=config.log_level.lower(),
        access_log=True,
    )

    server = uvicorn.Server(uvicorn_config)

    def handle_signal(signum, frame):
        logger.info(f"Received signal {signum}, initiating graceful shutdown...")
        server.should_exit = True

    signal.signal(signal.SIGINT, handle_signal)
    signal.signal(signal.SIGTERM, handle_signal)

    try:
        logger.info(f"Starting server on {config.host}:{config.port}")
        server.run()
    except Exception as e:
        logger.error(f"Server error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
