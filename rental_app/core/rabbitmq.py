import json
import logging

import aio_pika
from aio_pika import ExchangeType, Message
from tenacity import retry, stop_after_attempt, wait_exponential

from .breaker import events_breaker
from .settings import settings

logger = logging.getLogger(__name__)


class RabbitMQConnection:
    def __init__(self, url: str):
        self.url = url
        self.connection = None
        self.channel = None

    @retry(
        stop=stop_after_attempt(5), wait=wait_exponential(multiplier=2, min=2, max=10)
    )
    async def connect(self):
        if not self.url:
            raise ConnectionError("RABBITMQ_URL is not configured")
        if not self.connection or self.connection.is_closed:
            logger.info("Connecting to RabbitMQ...")
            self.connection = await aio_pika.connect_robust(self.url)
            self.channel = await self.connection.channel()
            logger.info("Connected to RabbitMQ.")

    async def declare_topology(self):
        """Declare the main events exchange plus the dead-letter pair."""
        await self.connect()

        dlx = await self.channel.declare_exchange(
            settings.RABBITMQ_DLX, ExchangeType.DIRECT, durable=True
        )
        dlq = await self.channel.declare_queue(
            settings.RABBITMQ_DLX_QUEUE, durable=True
        )
        await dlq.bind(dlx, routing_key=settings.RABBITMQ_DLX_QUEUE)

        main_exchange = await self.channel.declare_exchange(
            settings.RABBITMQ_MAIN_EXCHANGE, ExchangeType.TOPIC, durable=True
        )
        logger.info(
            "Exchange '%s' declared with DLQ '%s'.",
            settings.RABBITMQ_MAIN_EXCHANGE,
            settings.RABBITMQ_DLX_QUEUE,
        )
        return main_exchange

    async def publish_json(self, exchange_name: str, routing_key: str, data: dict):
        async def handler():
            await self.connect()
            exchange = await self.channel.get_exchange(exchange_name)
            message = Message(
                body=json.dumps(data, default=str).encode(),
                content_type="application/json",
            )
            await exchange.publish(message, routing_key=routing_key)
            logger.debug("Published message to %s:%s", exchange_name, routing_key)

        await events_breaker.call(handler)

    async def close(self):
        if self.connection and not self.connection.is_closed:
            await self.connection.close()


rabbitmq = RabbitMQConnection(settings.RABBITMQ_URL)
