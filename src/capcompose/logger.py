"""
Structured logging for composite build events.

Outputs one JSON-formatted line per build event so log pipelines can
index components and capability sets.  Dispatch calls are never logged;
only the build lifecycle is.

Logged events:
- composite.built
- composite.build_failed

Usage:
    from capcompose.logger import BuildLogger

    logger = BuildLogger(component="__3f2a...")
    logger.log_built(type_name="__3f2aClass", capabilities=["Greeter"], methods=1)
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Sequence

from capcompose.config import get_config

# Configure structured logger for build events
_build_logger = logging.getLogger("capcompose.builds")

# Default handler outputs to stderr
if not _build_logger.handlers:
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(message)s"))
    _build_logger.addHandler(handler)

# Set once; each BuildLogger applies its configured threshold in _emit
_build_logger.setLevel(logging.DEBUG)

_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


class BuildLogger:
    """
    Structured logger for composite build events.

    Each log entry includes standard fields for filtering:
    - service, component
    - event type and event-specific attributes
    """

    def __init__(
        self,
        component: str,
        service_name: Optional[str] = None,
        extra_labels: Optional[Dict[str, str]] = None,
    ):
        """
        Initialize build logger.

        Args:
            component: Component name of the owning builder
            service_name: Service name for log attribution (default from config)
            extra_labels: Additional labels for filtering
        """
        config = get_config()
        self.component = component
        self.service_name = service_name or config.service_name
        self.log_format = config.log_format
        self.extra_labels = extra_labels or {}
        self.min_level = _LEVELS[config.log_level]
        self._logger = _build_logger

    def _emit(self, event: str, level: str = "info", **extra_fields: Any) -> None:
        """
        Emit a structured log entry.

        Args:
            event: Event type (e.g., "composite.built")
            level: Log level (debug, info, warn, error)
            **extra_fields: Event-specific fields
        """
        if _LEVELS.get(level, logging.INFO) < self.min_level:
            return

        entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": level,
            "event": event,
            "service": self.service_name,
            "component": self.component,
        }
        entry.update(extra_fields)

        if self.extra_labels:
            entry["labels"] = self.extra_labels

        if self.log_format == "json":
            log_line = json.dumps(entry, default=str)
        else:
            details = " ".join(f"{k}={v}" for k, v in extra_fields.items())
            log_line = f"{event} component={self.component} {details}".rstrip()

        if level == "error":
            self._logger.error(log_line)
        elif level == "warn":
            self._logger.warning(log_line)
        elif level == "debug":
            self._logger.debug(log_line)
        else:
            self._logger.info(log_line)

    def log_built(
        self,
        type_name: str,
        capabilities: Sequence[str],
        methods: int,
        build_id: Optional[str] = None,
        base_type: Optional[str] = None,
    ) -> None:
        """Log a successful build."""
        self._emit(
            event="composite.built",
            type_name=type_name,
            capabilities=list(capabilities),
            method_count=methods,
            build_id=build_id,
            base_type=base_type,
        )

    def log_build_failed(
        self,
        capabilities: Sequence[str],
        error: BaseException,
    ) -> None:
        """Log a failed build with the error kind and message."""
        self._emit(
            event="composite.build_failed",
            level="warn",
            capabilities=list(capabilities),
            error_type=type(error).__name__,
            error=str(error),
        )
