import logging

from core.settings import settings

from .rabbitmq import RabbitMQConnection, rabbitmq

logger = logging.getLogger(__name__)


class EventPublisher:
    def __init__(self, connection: RabbitMQConnection = rabbitmq):
        self.connection = connection

    async def publish(self, event_name: str, data: dict) -> bool:
        if not self.connection.url:
            logger.debug("RabbitMQ not configured, dropping event %s", event_name)
            return False
        try:
            await self.connection.publish_json(
                exchange_name=settings.RABBITMQ_MAIN_EXCHANGE,
                routing_key=event_name,
                data=data,
            )
            return True
        except Exception:
            logger.exception("Failed to publish event %s", event_name)
            return False


event_publisher = EventPublisher()

