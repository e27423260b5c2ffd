"""Structured logging setup."""

from logqueue.logger.setup import setup_logger

__all__ = ["setup_logger"]
