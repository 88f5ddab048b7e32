from kafka import KafkaProducer
import json, logging
from storefront.core.config import settings

logger = logging.getLogger(__name__)

_producer = None

def get_producer():
    global _producer
    if _producer is None:
        _producer = KafkaProducer(
            bootstrap_servers=[settings.KAFKA_BOOTSTRAP],
            value_serializer=lambda v: json.dumps(v).encode("utf-8"),
            key_serializer=lambda v: (v.encode("utf-8") if isinstance(v, str) else v),
            linger_ms=5,
            retries=3,
        )
    return _producer

def send(topic: str, key: str, value: dict):
    if not settings.KAFKA_ENABLED:
        logger.debug("Kafka disabled, dropping %s event for key %s", value.get("type"), key)
        return
    p = get_producer()
    p.send(topic, key=key, value=value)
    p.flush(5)

def order_created_event(order) -> dict:
    return {
        "type": "order.created",
        "order_id": order.id,
        "user_id": order.user_id,
        "store_id": order.store_id,
        "payment_method": order.payment_method.value,
        "amount_cents": order.total_cents,
        "items": [
            {"product_id": it.product_id, "quantity": it.quantity, "price_cents": it.price_cents}
            for it in order.items
        ],
    }

def publish_order_created(order):
    """Keyed by order id so every event for one order lands on one partition."""
    send(topic=settings.TOPIC_ORDER_EVENTS, key=str(order.id), value=order_created_event(order))
