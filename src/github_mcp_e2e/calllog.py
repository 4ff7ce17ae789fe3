"""Per-call event log.

Every tool call the harness makes produces exactly one CallEvent, whatever its
outcome. Events stay in memory for the test that owns the logger, are echoed as JSONL
on stderr (pytest shows them next to a failure), and can be appended to one file
shared by the whole run.
"""

from __future__ import annotations

import json
import logging
import sys
import time
import uuid
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path

logger = logging.getLogger(__name__)

OUTCOMES = ("succeeded", "tool_error", "expected_error", "unexpected_success", "transport_error")


def new_correlation_id() -> str:
    return uuid.uuid4().hex


def elapsed_ms(start: float) -> int:
    """Milliseconds since a time.monotonic() reading."""
    return int((time.monotonic() - start) * 1000)


def _utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


@dataclass(frozen=True, slots=True)
class CallEvent:
    """Outcome of one tool call."""

    correlation_id: str
    tool: str
    outcome: str
    duration_ms: int
    reason: str | None = None
    timestamp: str = field(default_factory=_utc_timestamp)

    def __post_init__(self) -> None:
        if self.outcome not in OUTCOMES:
            raise ValueError(f"unknown call outcome: {self.outcome!r}")

    def to_json(self) -> str:
        payload: dict[str, object] = {
            "correlation_id": self.correlation_id,
            "duration_ms": self.duration_ms,
            "outcome": self.outcome,
            "timestamp": self.timestamp,
            "tool": self.tool,
        }
        if self.reason is not None:
            payload["reason"] = self.reason
        return json.dumps(payload, sort_keys=True, separators=(",", ":"))


class CallLogger:
    """Collects call events for one test and echoes them as JSONL."""

    def __init__(self, *, sink_path: Path | None = None, echo_stderr: bool = True) -> None:
        self.events: list[CallEvent] = []
        self._sink_path = sink_path
        self._echo_stderr = echo_stderr

    def write_event(self, event: CallEvent) -> None:
        self.events.append(event)
        line = event.to_json()
        if self._echo_stderr:
            print(line, file=sys.stderr)
        if self._sink_path is None:
            return
        try:
            self._sink_path.parent.mkdir(parents=True, exist_ok=True)
            with self._sink_path.open("a", encoding="utf-8") as f:
                f.write(line + "\n")
        except OSError as exc:
            # only the file copy is lost
            logger.warning("Could not append call event to %s: %s", self._sink_path, exc)

    def outcomes(self) -> Counter[str]:
        """Number of recorded calls per outcome."""
        return Counter(event.outcome for event in self.events)

    def calls_to(self, tool: str) -> list[CallEvent]:
        return [event for event in self.events if event.tool == tool]
