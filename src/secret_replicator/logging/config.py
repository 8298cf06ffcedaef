"""Structured logging configuration using structlog.

Two shapes are supported. On a workstation logs are rendered for humans and
also kept in a rotating JSON file. Inside a pod the container runtime
collects stdout, so logs become JSON lines tagged with the pod identity and
no file is written.
"""

from __future__ import annotations

import logging
import os
import sys
from datetime import datetime, timedelta
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

import structlog

COMPONENT = "secret-replicator"

# Log file configuration
LOG_DIR = Path.home() / ".local" / "state" / "secret-replicator"
LOG_FILE_NAME = "replicator.log"
MAX_LOG_SIZE = 10 * 1024 * 1024  # 10 MB
BACKUP_COUNT = 5
RETENTION_DAYS = 30

# Set by the kubelet in every container
IN_CLUSTER_ENV = "KUBERNETES_SERVICE_HOST"
# Downward API variables, when the deployment exposes them
POD_NAME_ENV = "POD_NAME"
POD_NAMESPACE_ENV = "POD_NAMESPACE"


def running_in_cluster() -> bool:
    """Tell whether the process runs inside a Kubernetes pod."""
    return bool(os.environ.get(IN_CLUSTER_ENV))


def _pod_context() -> dict[str, str]:
    context = {"component": COMPONENT}
    if pod := os.environ.get(POD_NAME_ENV):
        context["pod"] = pod
    if namespace := os.environ.get(POD_NAMESPACE_ENV):
        context["pod_namespace"] = namespace
    return context


def _add_pod_context(_: Any, __: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    for key, value in _pod_context().items():
        event_dict.setdefault(key, value)
    return event_dict


def _cleanup_old_logs(log_dir: Path) -> None:
    """Delete replicator log files older than RETENTION_DAYS."""
    if not log_dir.exists():
        return
    cutoff = datetime.now() - timedelta(days=RETENTION_DAYS)
    for log_file in log_dir.glob(f"{LOG_FILE_NAME}*"):
        try:
            if datetime.fromtimestamp(log_file.stat().st_mtime) < cutoff:
                log_file.unlink()
        except OSError:
            pass  # best-effort, a locked file is retried on the next start


def _shared_processors() -> list[structlog.types.Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]


def _json_formatter(pre_chain: list[structlog.types.Processor]) -> logging.Formatter:
    return structlog.stdlib.ProcessorFormatter(
        processors=[
            _add_pod_context,
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        foreign_pre_chain=pre_chain,
    )


def _setup_file_logging(log_dir: Path) -> None:
    """Set up rotating JSON file handler under ``log_dir``."""
    log_dir.mkdir(parents=True, exist_ok=True)
    _cleanup_old_logs(log_dir)

    file_handler = RotatingFileHandler(
        log_dir / LOG_FILE_NAME,
        maxBytes=MAX_LOG_SIZE,
        backupCount=BACKUP_COUNT,
    )
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(_json_formatter(_shared_processors()))

    logging.getLogger().addHandler(file_handler)


def configure_logging(
    verbose: bool = False,
    debug: bool = False,
    json_output: bool | None = None,
    log_to_file: bool | None = None,
    log_dir: Path | None = None,
) -> None:
    """Configure structured logging for the controller.

    ``json_output`` and ``log_to_file`` left as None follow the environment:
    inside a pod logs are JSON on stdout only, elsewhere they are rendered
    for the console and also written to ``log_dir``.

    Args:
        verbose: Enable verbose (INFO level) output.
        debug: Enable debug mode (DEBUG level).
        json_output: Render console logs as JSON lines.
        log_to_file: Also write logs to the rotating file handler.
        log_dir: Directory of the rotating log file, LOG_DIR by default.
    """
    in_cluster = running_in_cluster()
    if json_output is None:
        json_output = in_cluster
    if log_to_file is None:
        log_to_file = not in_cluster

    if debug:
        log_level = logging.DEBUG
    elif verbose:
        log_level = logging.INFO
    else:
        log_level = logging.WARNING

    shared_processors = _shared_processors()

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    if json_output:
        console_handler.setFormatter(_json_formatter(shared_processors))
    else:
        console_handler.setFormatter(
            structlog.stdlib.ProcessorFormatter(
                processor=structlog.dev.ConsoleRenderer(
                    colors=sys.stdout.isatty(),
                    exception_formatter=structlog.dev.RichTracebackFormatter(
                        show_locals=debug,
                    ),
                ),
                foreign_pre_chain=shared_processors,
            )
        )

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)  # Let handlers filter
    root_logger.addHandler(console_handler)

    if log_to_file:
        _setup_file_logging(log_dir or LOG_DIR)


def get_logger(name: str | None = None, **initial_context: Any) -> structlog.BoundLogger:
    """Get a configured logger with optional initial context.

    Args:
        name: Logger name. If None, uses the calling module's name.
        **initial_context: Initial context variables to bind to the logger.

    Returns:
        A bound structlog logger.
    """
    logger: structlog.BoundLogger = structlog.get_logger(name)
    if initial_context:
        logger = logger.bind(**initial_context)
    return logger
