#!/usr/bin/env python3
"""
Log and acknowledge every audit or activity record until interrupted.

Usage:
  python scripts/consume_logs.py [audit|activity] [PREFETCH]
"""

import signal
import sys
import threading
from logqueue import (
    ConsumeOptions,
    LogQueueError,
    consume_activity_logs,
    consume_audit_logs,
    init_activity_client,
    init_audit_client,
)
from logqueue.logger import setup_logger

logger = setup_logger(__name__)


def handle_record(record, ack):
    logger.info(f"Received {type(record).__name__}: {record.model_dump_json(by_alias=True)}")
    ack(True)


def main() -> int:
    kind = sys.argv[1].lower() if len(sys.argv) > 1 else "audit"
    if kind not in ("audit", "activity"):
        print("Usage: consume_logs.py [audit|activity] [PREFETCH]", file=sys.stderr)
        return 1
    options = ConsumeOptions()
    if len(sys.argv) > 2:
        options = ConsumeOptions(prefetch_count=int(sys.argv[2]))

    try:
        if kind == "audit":
            client = init_audit_client()
            consume_audit_logs(client, handle_record, options)
        else:
            client = init_activity_client()
            consume_activity_logs(client, handle_record, options)
    except LogQueueError as e:
        logger.error(f"Could not start {kind} consumer: {str(e)}")
        return 1

    stop = threading.Event()

    def signal_handler(sig, frame):
        logger.info("Received shutdown signal")
        stop.set()

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    stop.wait()
    client.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
