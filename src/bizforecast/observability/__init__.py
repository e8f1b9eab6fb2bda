"""Observability package for structured logging.

Provides:
- configure_structlog: Configure structlog processors for the current environment
"""

from __future__ import annotations

from src.bizforecast.observability.logging import configure_structlog

__all__ = ["configure_structlog"]
