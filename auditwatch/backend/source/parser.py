"""
source/parser.py

Converts the raw text dump of the audit log into typed LogEntry records.

Wire format (one record per labelled block, one label per line):

    Event ID: 4625
    Time Created: 2024-05-01T10:22:13.000
    Task: Logon
    Message: An account failed to log on. failed login for user bob

State machine: single forward pass, one piece of mutable state
(the record under construction):
  'Event ID:'     → start a new record (discarding any unfinished one)
  'Time Created:' → set timestamp on the current record
  'Task:'         → set event_type on the current record
  'Message:'      → set details, finalize, emit, reset
  anything else   → ignored

A record without a 'Message:' line is never emitted.
A 'Message:' line finalizing a record with an empty id is suppressed.
"""

from __future__ import annotations

import logging

from ..metrics import METRICS
from ..models import LogEntry

logger = logging.getLogger(__name__)

LABEL_ID = "Event ID:"
LABEL_TIMESTAMP = "Time Created:"
LABEL_EVENT_TYPE = "Task:"
LABEL_DETAILS = "Message:"

_FIELD_BY_LABEL: dict[str, str] = {
    LABEL_TIMESTAMP: "timestamp",
    LABEL_EVENT_TYPE: "event_type",
}


def _value(line: str, label: str) -> str:
    return line[len(label):].strip()


def parse_event_log(raw: str) -> list[LogEntry]:
    """
    Parse a raw audit text dump into LogEntry records, in input order.

    Pure function: no I/O. Parse anomalies are counted in METRICS
    and logged, never raised.
    """
    entries: list[LogEntry] = []
    current: dict[str, str] | None = None

    for lineno, line in enumerate(raw.splitlines(), start=1):
        line = line.strip()

        if line.startswith(LABEL_ID):
            if current is not None and current.get("id"):
                METRICS.records_incomplete.inc()
                logger.debug(
                    "Record %r at line %d has no %r line: dropped",
                    current["id"], lineno, LABEL_DETAILS,
                )
            current = {"id": _value(line, LABEL_ID)}
            continue

        if line.startswith(LABEL_DETAILS):
            record = current or {}
            current = None
            if not record.get("id"):
                METRICS.records_degenerate.inc()
                logger.warning(
                    "Line %d: %r without a preceding %r: record suppressed",
                    lineno, LABEL_DETAILS, LABEL_ID,
                )
                continue
            entries.append(LogEntry(
                id=record["id"],
                timestamp=record.get("timestamp", ""),
                event_type=record.get("event_type", ""),
                details=_value(line, LABEL_DETAILS),
            ))
            METRICS.records_parsed.inc()
            continue

        for label, field_name in _FIELD_BY_LABEL.items():
            if line.startswith(label):
                # Field lines before any 'Event ID:' open an id-less record
                if current is None:
                    current = {"id": ""}
                current[field_name] = _value(line, label)
                break

    if current is not None and current.get("id"):
        METRICS.records_incomplete.inc()
        logger.debug("Trailing record %r has no %r line: dropped", current["id"], LABEL_DETAILS)

    return entries
