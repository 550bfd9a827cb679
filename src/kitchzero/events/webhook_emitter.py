"""Outbound webhook delivery with HMAC-SHA256 signing.

Request handlers never wait on subscribers: ``dispatch_event`` schedules the
fan-out as a background task and returns at once. ``emit_event`` is the
awaitable fan-out itself, used by the task and by callers that want results.
"""

import asyncio
import hashlib
import hmac
import json
import logging
from datetime import datetime, timezone

import httpx

from kitchzero.config import settings
from kitchzero.models.webhook import WebhookEnvelope
from kitchzero.services.id_generator import generate_id

from .webhook_config import WebhookSubscription, webhook_registry

logger = logging.getLogger(__name__)

# Strong references to in-flight deliveries; the event loop only keeps weak ones.
_inflight: set[asyncio.Task] = set()


def _sign_payload(body: bytes, secret: str) -> str:
    """Compute HMAC-SHA256 signature over the raw JSON body."""
    return hmac.new(secret.encode("utf-8"), body, hashlib.sha256).hexdigest()


def build_envelope(
    event_type: str,
    payload: dict,
    source_system: str = "kitchzero-api",
) -> WebhookEnvelope:
    """Build a webhook envelope (unsigned). Signature is added per-subscriber."""
    return WebhookEnvelope(
        schema_version="1.0",
        event_type=event_type,
        event_id=generate_id("evt_"),
        occurred_at=datetime.now(timezone.utc),
        source_system=source_system,
        payload=payload,
    )


def _signed_request(envelope: WebhookEnvelope, secret: str) -> tuple[bytes, dict]:
    body_dict = envelope.model_dump(mode="json")
    signature = _sign_payload(json.dumps(body_dict, separators=(",", ":")).encode("utf-8"), secret)
    body_dict["signature"] = signature
    headers = {
        "Content-Type": "application/json",
        "X-KitchZero-Signature": signature,
        "X-KitchZero-Event": envelope.event_type,
        "X-KitchZero-Delivery": envelope.event_id,
    }
    return json.dumps(body_dict, separators=(",", ":")).encode("utf-8"), headers


async def _deliver(client: httpx.AsyncClient, envelope: WebhookEnvelope, sub: WebhookSubscription) -> dict:
    """POST one signed envelope, retrying transport errors and 5xx replies."""
    body, headers = _signed_request(envelope, sub.secret)
    attempts = max(1, settings.webhook_max_attempts)
    error = "no attempt made"
    status = None

    for attempt in range(1, attempts + 1):
        try:
            resp = await client.post(sub.url, content=body, headers=headers)
        except httpx.HTTPError as exc:
            status, error = None, str(exc) or type(exc).__name__
        else:
            if resp.status_code < 300:
                return {"url": sub.url, "status": resp.status_code, "error": None, "attempts": attempt}
            status, error = resp.status_code, f"HTTP {resp.status_code}"
            if resp.status_code < 500:
                break
        logger.debug("Webhook attempt %d/%d to %s failed: %s", attempt, attempts, sub.url, error)

    logger.warning("Webhook delivery of %s to %s failed: %s", envelope.event_id, sub.url, error)
    return {"url": sub.url, "status": status, "error": error, "attempts": attempt}


async def emit_event(event_type: str, payload: dict) -> list[dict]:
    """Deliver an event to every matching subscriber concurrently.

    Returns one result per subscriber (url, status, error, attempts).
    """
    subscribers = webhook_registry.get_subscribers(event_type)
    if not subscribers:
        return []

    envelope = build_envelope(event_type, payload)
    async with httpx.AsyncClient(timeout=settings.webhook_timeout_seconds) as client:
        return list(await asyncio.gather(*(_deliver(client, envelope, sub) for sub in subscribers)))


def _on_delivery_done(task: asyncio.Task) -> None:
    _inflight.discard(task)
    if task.cancelled():
        logger.warning("Webhook delivery task %s cancelled", task.get_name())
        return
    exc = task.exception()
    if exc is not None:
        logger.error("Webhook delivery task %s crashed: %s", task.get_name(), exc)
        return
    failed = [r for r in task.result() if r["error"]]
    if failed:
        logger.warning("Webhook delivery task %s: %d of %d subscribers failed",
                       task.get_name(), len(failed), len(task.result()))


def dispatch_event(event_type: str, payload: dict) -> int:
    """Schedule delivery of an event in the background.

    Returns the number of subscribers the event was scheduled for. Must be
    called from inside a running event loop.
    """
    count = len(webhook_registry.get_subscribers(event_type))
    if not count:
        return 0
    task = asyncio.get_running_loop().create_task(
        emit_event(event_type, payload), name=f"webhook:{event_type}"
    )
    _inflight.add(task)
    task.add_done_callback(_on_delivery_done)
    return count


def pending_deliveries() -> int:
    return len(_inflight)


async def drain_deliveries(timeout: float | None = None) -> None:
    """Wait for scheduled deliveries to finish; cancel whatever outlives the timeout."""
    if not _inflight:
        return
    tasks = list(_inflight)
    _, pending = await asyncio.wait(tasks, timeout=timeout)
    for task in pending:
        task.cancel()
    if pending:
        await asyncio.gather(*pending, return_exceptions=True)
        logger.warning("Cancelled %d unfinished webhook deliveries", len(pending))
