"""
Structured JSON event logger.

Emits one JSON object per line to stderr so runs can be parsed by log
aggregators. Optional webhook: when configured, direction flips and
errors are POSTed to the URL.
"""

from __future__ import annotations

import json
import logging
import sys
import urllib.request
from datetime import datetime, timezone
from typing import Any

logger = logging.getLogger("amw.events")


class StructuredEventLogger:
    """Emit structured JSON events to stderr and optional webhook."""

    _ALERT_EVENTS = frozenset({"direction_flip", "error"})

    def __init__(
        self,
        symbol: str,
        *,
        enabled: bool = True,
        webhook_url: str = "",
        stream: Any = None,
    ) -> None:
        self._symbol = symbol
        self._enabled = enabled
        self._webhook_url = webhook_url.strip()
        self._stream = stream or sys.stderr

    def _emit(self, event_type: str, **fields: Any) -> dict:
        record = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "event": event_type,
            "symbol": self._symbol,
            **fields,
        }
        if self._enabled:
            self._stream.write(json.dumps(record) + "\n")
            self._stream.flush()

        if self._webhook_url and event_type in self._ALERT_EVENTS:
            self._post_webhook(record)

        return record

    def _post_webhook(self, record: dict) -> None:
        try:
            data = json.dumps(record).encode("utf-8")
            req = urllib.request.Request(
                self._webhook_url,
                data=data,
                headers={"Content-Type": "application/json"},
                method="POST",
            )
            urllib.request.urlopen(req, timeout=5)
        except Exception as exc:
            logger.warning("Webhook POST failed: %s", exc)

    def run_start(self, indicator: str, bars: int, warm_up_period: int) -> dict:
        return self._emit(
            "run_start",
            indicator=indicator,
            bars=bars,
            warm_up_period=warm_up_period,
        )

    def direction_flip(self, bar_time: str, direction: str, close: str, level: str) -> dict:
        return self._emit(
            "direction_flip",
            bar_time=bar_time,
            direction=direction,
            close=close,
            level=level,
        )

    def run_complete(self, bars: int, flips: int, level: str | None, direction: str) -> dict:
        return self._emit(
            "run_complete",
            bars=bars,
            flips=flips,
            level=level,
            direction=direction,
        )

    def error(self, message: str, detail: str = "") -> dict:
        return self._emit("error", message=message, detail=detail)
