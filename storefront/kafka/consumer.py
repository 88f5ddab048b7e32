import threading, json, logging
from kafka import KafkaConsumer
from sqlalchemy.orm import Session
from storefront.core.config import settings
from storefront.db.session import session_scope
from storefront.services.orders import mark_paid

logger = logging.getLogger(__name__)

_stop_event = threading.Event()
_thread = None

def process_event(ev: dict, db: Session):
    if ev.get("type") == "payment.succeeded":
        order_id = ev.get("order_id")
        if mark_paid(db, order_id, ev.get("amount_cents")) is None:
            logger.warning("payment.succeeded for unknown order %s", order_id)

def run_loop():
    consumer = KafkaConsumer(
        settings.TOPIC_PAYMENT_EVENTS,
        bootstrap_servers=[settings.KAFKA_BOOTSTRAP],
        group_id="storefront-orders",
        value_deserializer=lambda v: json.loads(v.decode("utf-8")),
        enable_auto_commit=True,
        auto_offset_reset="earliest",
    )
    try:
        for msg in consumer:
            if _stop_event.is_set(): break
            try:
                with session_scope() as db:
                    process_event(msg.value, db)
            except Exception:
                # log and skip, the offset is already committed
                logger.exception("Failed to process payment event at offset %s", msg.offset)
    finally:
        consumer.close()

def start():
    global _thread
    if _thread and _thread.is_alive(): return
    _stop_event.clear()
    _thread = threading.Thread(target=run_loop, daemon=True)
    _thread.start()
    logger.info("Payment events consumer started on %s", settings.TOPIC_PAYMENT_EVENTS)

def stop():
    _stop_event.set()
