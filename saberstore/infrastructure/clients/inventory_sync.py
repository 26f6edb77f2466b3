"""Inventory sync webhook client with exponential backoff retry logic"""

import httpx
import asyncio
import logging
from typing import Dict, Any, Optional
from saberstore.config import settings
from saberstore.infrastructure.observability.metrics import webhook_latency_histogram, webhook_failure_counter


class InventorySyncClient:
    """Client notifying the marketplace sync service of stock movements"""

    def __init__(self, webhook_url: Optional[str] = None, timeout: Optional[float] = None):
        self.webhook_url = webhook_url or settings.inventory_sync_webhook_url
        self.timeout = timeout or settings.http_timeout_seconds
        self.max_retries = settings.webhook_max_retries
        self.backoff_base = settings.webhook_backoff_base

    async def send_stock_event(self, payload: Dict[str, Any]) -> None:
        """
        Send stock reservation event so marketplace listings can be adjusted.

        Retry strategy:
        - Exponential backoff: 1s, 2s, 4s, 8s (base * 2^attempt)
        - Retries on 5xx errors and network failures
        - Tracks latency histogram and failure counter

        Runs after the order is committed; a delivery failure is logged and
        never touches the order.
        """
        attempt = 0
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            while attempt < self.max_retries:
                try:
                    with webhook_latency_histogram.time():
                        response = await client.post(self.webhook_url, json=payload)
                        response.raise_for_status()
                        return  # Success

                except (httpx.HTTPStatusError, httpx.RequestError) as e:
                    attempt += 1
                    webhook_failure_counter.inc()

                    if attempt >= self.max_retries:
                        logging.error(
                            f"Inventory sync failed after {attempt} attempts: {e}",
                            extra={"order_number": payload.get("order_number")},
                        )
                        raise

                    backoff = self.backoff_base * (2 ** (attempt - 1))
                    await asyncio.sleep(backoff)
