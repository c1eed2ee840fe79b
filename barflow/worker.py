"""Background worker that delivers queued notification emails"""

import asyncio
import logging
import signal

from pydantic import ValidationError

from barflow.config import settings
from barflow.models.notification import NotificationEvent
from barflow.services.email_service import EmailService, get_email_service
from barflow.services.redis_service import redis_service

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


class NotificationWorker:
    """Worker that pops notification events from Redis and emails them

    A failed delivery is pushed back onto the queue until the event has
    been attempted ``max_attempts`` times.
    """

    def __init__(
        self,
        email_service: EmailService = None,
        queue_name: str = None,
        max_attempts: int = None
    ):
        self.email_service = email_service or get_email_service()
        self.queue_name = queue_name or settings.notification_queue
        self.max_attempts = max_attempts or settings.notification_max_attempts
        self.running = False

    async def start(self):
        """Start the worker"""
        logger.info("Starting notification worker...")
        self.running = True
        await redis_service.connect()

        for sig in (signal.SIGINT, signal.SIGTERM):
            asyncio.get_running_loop().add_signal_handler(
                sig, lambda: asyncio.create_task(self.stop())
            )

        logger.info(f"Worker listening on queue: {self.queue_name}")

        while self.running:
            try:
                message = await redis_service.dequeue(self.queue_name, timeout=5)
                if message:
                    await self.process_message(message)
            except Exception as e:
                logger.error(f"Worker error: {e}", exc_info=True)
                await asyncio.sleep(1)

        await redis_service.disconnect()
        logger.info("Worker stopped")

    async def stop(self):
        """Stop the worker gracefully"""
        logger.info("Stopping worker...")
        self.running = False

    async def process_message(self, message: str) -> bool:
        """Deliver one queued event, returns True when the email was sent"""
        try:
            event = NotificationEvent.model_validate_json(message)
        except ValidationError as e:
            logger.error(f"Dropping malformed notification: {e}")
            return False

        try:
            result = await asyncio.to_thread(
                self.email_service.send,
                event.recipient_email,
                event.subject,
                event.template,
                event.data
            )
        except Exception as e:
            logger.error(f"Rendering or sending notification {event.id} failed: {e}", exc_info=True)
            result = {"sent": False, "error": str(e)}

        if result.get("sent"):
            logger.info(f"Notification {event.id} ({event.type.value}) delivered to {event.recipient_email}")
            return True

        event.attempts += 1
        if event.attempts < self.max_attempts:
            logger.warning(
                f"Notification {event.id} failed (attempt {event.attempts}/{self.max_attempts}): "
                f"{result.get('error')}; re-queueing"
            )
            await redis_service.enqueue(self.queue_name, event.model_dump_json())
        else:
            logger.error(
                f"Giving up on notification {event.id} to {event.recipient_email} "
                f"after {event.attempts} attempts: {result.get('error')}"
            )
        return False


async def main():
    """Main entry point"""
    worker = NotificationWorker()
    await worker.start()


def run():
    asyncio.run(main())


if __name__ == "__main__":
    run()
