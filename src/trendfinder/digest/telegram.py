"""Telegram Bot API client — deliver digests via bot token."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass

import httpx

from trendfinder.digest.renderer import chunk_message, format_for_telegram

logger = logging.getLogger(__name__)

TELEGRAM_API_BASE = "https://api.telegram.org"
ALERT_PREFIX = "[TRENDFINDER ALERT]"


@dataclass(frozen=True)
class SendResult:
    """Result of a Telegram sendMessage call."""

    ok: bool
    message_id: int | None = None
    error: str | None = None


def send_message(
    bot_token: str,
    chat_id: str,
    text: str,
    *,
    parse_mode: str | None = None,
    disable_web_page_preview: bool = True,
    max_retries: int = 3,
) -> SendResult:
    """Send a single message via the Telegram Bot API.

    Messages go out as plain text unless *parse_mode* is given. Uses
    exponential backoff on failure: 2^attempt seconds (1s, 2s, 4s, ...).
    Returns a structured result — never raises.
    """
    url = f"{TELEGRAM_API_BASE}/bot{bot_token}/sendMessage"
    payload: dict = {
        "chat_id": chat_id,
        "text": text,
        "disable_web_page_preview": disable_web_page_preview,
    }
    if parse_mode:
        payload["parse_mode"] = parse_mode

    last_error = ""
    for attempt in range(max_retries):
        try:
            response = httpx.post(url, json=payload, timeout=30)
            data = response.json()
            if data.get("ok"):
                msg_id = data["result"]["message_id"]
                logger.info("Telegram message sent: message_id=%d", msg_id)
                return SendResult(ok=True, message_id=msg_id)
            last_error = data.get("description", "Unknown Telegram error")
            logger.warning(
                "Telegram API error (attempt %d/%d): %s",
                attempt + 1, max_retries, last_error,
            )
        except Exception as exc:
            last_error = str(exc)
            logger.warning(
                "Telegram request failed (attempt %d/%d): %s",
                attempt + 1, max_retries, last_error,
            )

        if attempt < max_retries - 1:
            time.sleep(2 ** attempt)

    return SendResult(ok=False, error=last_error)


def send_messages(
    bot_token: str,
    chat_id: str,
    chunks: list[str],
    *,
    max_retries: int = 3,
) -> list[SendResult]:
    """Send multiple message chunks in order. Stops on first failure."""
    results: list[SendResult] = []
    for chunk in chunks:
        result = send_message(bot_token, chat_id, chunk, max_retries=max_retries)
        results.append(result)
        if not result.ok:
            break
    return results


@dataclass(frozen=True)
class DeliveryResult:
    """Outcome of delivering one digest, possibly split over several messages."""

    delivered: bool
    sent: int = 0
    error: str | None = None


def deliver_digest(
    bot_token: str,
    chat_id: str,
    text: str,
    *,
    max_retries: int = 3,
) -> DeliveryResult:
    """Clean up *text* for plain-text Telegram, split it and send every chunk in order."""
    chunks = chunk_message(format_for_telegram(text))
    results = send_messages(bot_token, chat_id, chunks, max_retries=max_retries)
    sent = sum(1 for r in results if r.ok)
    if sent == len(chunks):
        logger.info("Digest delivered in %d message(s)", sent)
        return DeliveryResult(delivered=True, sent=sent)

    failed = next((r for r in results if not r.ok), None)
    error = failed.error if failed else "not sent"
    logger.error("Digest delivery stopped after %d of %d message(s): %s", sent, len(chunks), error)
    return DeliveryResult(delivered=False, sent=sent, error=error)


def send_alert(bot_token: str, chat_id: str, message: str) -> None:
    """Send an operator alert for a failed run. Never raises."""
    try:
        send_message(bot_token, chat_id, f"{ALERT_PREFIX}\n{message}", max_retries=2)
    except Exception:
        logger.exception("Failed to send alert")
