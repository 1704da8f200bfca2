import httpx
import asyncio
import logging
from hvacops.core.config import settings
from hvacops.core.metrics import webhook_deliveries

logger = logging.getLogger(__name__)


async def send_webhook(payload: dict, retries: int | None = None) -> bool:

    if not settings.WEBHOOK_URL:
        return False

    if retries is None:
        retries = settings.WEBHOOK_RETRIES

    backoff = 1.0

    for attempt in range(1, retries + 1):
        try:
            async with httpx.AsyncClient(timeout=settings.WEBHOOK_TIMEOUT) as client:
                response = await client.post(settings.WEBHOOK_URL, json=payload)

                if 200 <= response.status_code < 300:
                    webhook_deliveries.labels(status="success").inc()
                    logger.info(f"Webhook delivery succeeded for order {payload.get('order_id')}")
                    return True
                else:
                    webhook_deliveries.labels(status="retry").inc()
                    logger.warning(
                        f"Webhook delivery failed (attempt {attempt}/{retries}): "
                        f"Status {response.status_code} for order {payload.get('order_id')}"
                    )
        except httpx.TimeoutException:
            webhook_deliveries.labels(status="timeout").inc()
            logger.warning(
                f"Webhook timeout (attempt {attempt}/{retries}) for order {payload.get('order_id')}"
            )
        except httpx.HTTPError as e:
            webhook_deliveries.labels(status="error").inc()
            logger.warning(
                f"Webhook delivery error (attempt {attempt}/{retries}): {e} "
                f"for order {payload.get('order_id')}"
            )

        if attempt < retries:
            await asyncio.sleep(backoff)
            backoff *= 2.0

    webhook_deliveries.labels(status="failed").inc()
    logger.error(f"Webhook delivery failed after {retries} attempts for order {payload.get('order_id')}")
    return False


async def notify_status_change(order_id: int, previous, current) -> bool:
    return await send_webhook({
        "order_id": order_id,
        "previous_status": str(previous),
        "status": str(current),
    })
