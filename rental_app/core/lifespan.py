import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from core.rabbitmq import rabbitmq

from .cache import cache
from .document_storage import document_storage

logger = logging.getLogger("startup")


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Waiting for application startup...")

    try:
        if await document_storage.connect():
            logger.info("Cloudinary connected.")
    except Exception:
        logger.exception("Cannot connect to Cloudinary")

    if rabbitmq.url:
        try:
            await rabbitmq.declare_topology()
            logger.info("RabbitMQ connected.")
        except Exception:
            logger.exception("RabbitMQ connection failed")
    else:
        logger.warning("RABBITMQ_URL not set; domain events will be dropped.")

    if cache.configured:
        try:
            await cache.connect()
            logger.info("Upstash Redis connected.")
        except Exception:
            logger.exception("Upstash Redis connection failed")
    else:
        logger.warning("Upstash Redis not configured; notification state is unavailable.")

    logger.info("Application startup complete.")

    yield

    try:
        await rabbitmq.close()
    except Exception:
        logger.exception("Failed to close RabbitMQ connection")
