"""Telegram Bot API client used for digests and command replies.

Delivery is best-effort: ``send`` logs failures and returns False, it never
raises into the caller.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import requests

logger = logging.getLogger(__name__)

# Official limit: 4,096 characters per message
# Reference: https://limits.tginfo.me/en
TELEGRAM_MAX_MESSAGE_LENGTH = 4096
TRUNCATION_MARKER = "\n… (truncated)"


def truncate_message(message: str, limit: int = TELEGRAM_MAX_MESSAGE_LENGTH) -> str:
    if len(message) <= limit:
        return message
    cut = message.rfind("\n", 0, limit - len(TRUNCATION_MARKER))
    if cut <= limit // 2:
        cut = limit - len(TRUNCATION_MARKER)
    return message[:cut] + TRUNCATION_MARKER


class TelegramNotifier:
    def __init__(
        self,
        bot_token: str,
        default_chat_id: str,
        *,
        timeout: int = 30,
        session: Optional[requests.Session] = None,
    ):
        self.bot_token = bot_token
        self.default_chat_id = default_chat_id
        self.timeout = timeout
        self.session = session or requests.Session()
        self.base_url = f"https://api.telegram.org/bot{bot_token}"

    def send(self, message: str, chat_id: Optional[str] = None) -> bool:
        target = chat_id or self.default_chat_id
        data = {
            "chat_id": target,
            "text": truncate_message(message),
            "disable_web_page_preview": True,
        }
        try:
            response = self.session.post(f"{self.base_url}/sendMessage", json=data, timeout=self.timeout)
            response.raise_for_status()
            result = response.json()
            if not result.get("ok"):
                logger.error(f"Telegram API error: {result.get('description', 'Unknown error')}")
                return False
        except requests.exceptions.HTTPError as e:
            status = e.response.status_code if e.response is not None else "?"
            if status == 401:
                logger.error("Telegram unauthorized - check bot token")
            elif status == 400:
                logger.error("Telegram bad request - check chat ID")
            else:
                logger.error(f"Telegram HTTP error: {e}")
            return False
        except Exception as e:
            logger.error(f"Telegram error: {e}")
            return False
        logger.info(f"Telegram message sent to chat {target}: {message[:50]}...")
        return True

    def get_updates(self, offset: int = 0, *, long_poll: int = 30) -> List[Dict[str, Any]]:
        params = {"offset": offset, "timeout": long_poll, "allowed_updates": '["message"]'}
        try:
            response = self.session.get(
                f"{self.base_url}/getUpdates", params=params, timeout=long_poll + self.timeout
            )
            response.raise_for_status()
            result = response.json()
        except Exception as e:
            logger.error(f"Error getting updates: {e}")
            return []
        if not result.get("ok"):
            logger.error(f"Telegram API error: {result}")
            return []
        return result.get("result") or []
