#!/usr/bin/env python3
"""
Publish sample audit records with search keys 1..N.

Usage:
  python scripts/publish_sample_logs.py [COUNT]
  COUNT defaults to 5. RABBITMQ_URL must be set (environment or .env).
"""

import sys
from logqueue import AuditRecord, LogQueueError, init_audit_client, publish_audit_log
from logqueue.logger import setup_logger

logger = setup_logger(__name__)


def main() -> int:
    count = int(sys.argv[1]) if len(sys.argv) > 1 else 5

    try:
        client = init_audit_client()
    except LogQueueError as e:
        logger.error(f"Could not initialize audit client: {str(e)}")
        return 1

    with client:
        for i in range(1, count + 1):
            record = AuditRecord(
                module="sample",
                action_type="update",
                search_key=str(i),
                before='{"status": "draft"}',
                after='{"status": "published"}',
                action_by="publish_sample_logs",
            )
            sent = publish_audit_log(client, record)
            logger.info(f"Published audit record {sent.search_key} at {sent.timestamp.isoformat()}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
