"""Structured logging utility for the journal index."""

import logging
from typing import Any, Dict


class StructuredLogger:
    """Structured logger for indexing, search and reconciliation operations."""

    def __init__(self, name: str = "journal_index"):
        self.logger = logging.getLogger(name)
        self.logger.setLevel(logging.INFO)

        # Create handler if not already set
        if not self.logger.handlers:
            handler = logging.StreamHandler()
            formatter = logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
            )
            handler.setFormatter(formatter)
            self.logger.addHandler(handler)

    def log_operation(self, operation: str, status: str, details: Dict[str, Any] = None):
        """Log a structured operation."""
        message = f"Operation: {operation}, Status: {status}"
        if details:
            message += f", Details: {details}"

        if status in ("failed", "error"):
            self.logger.error(message)
        elif status in ("skipped", "warning"):
            self.logger.warning(message)
        else:
            self.logger.info(message)

    def log_index_operation(self, operation: str, path: str, details: Dict[str, Any] = None, status: str = "success"):
        """Log a sidecar record operation."""
        log_details = {"path": path}
        if details:
            log_details.update(details)

        self.log_operation(f"index.{operation}", status, log_details)

    def log_search(self, query: str, store_type: str, candidates: int, returned: int):
        """Log a completed search."""
        details = {
            "query": query[:50] + "..." if len(query) > 50 else query,
            "type": store_type,
            "candidates": candidates,
            "returned": returned,
        }
        self.log_operation("search.query", "success", details)

    def log_reconcile(self, store_root: str, created: int, skipped: int, start_time: float, end_time: float):
        """Log a reconciliation pass over one store root."""
        duration_ms = round((end_time - start_time) * 1000, 2)
        details = {
            "store_root": store_root,
            "created": created,
            "skipped": skipped,
            "duration_ms": duration_ms,
        }
        self.log_operation("reconcile.store", "success", details)

    def log_entry_write(self, path: str, sections: Any, status: str = "success"):
        """Log a note written to a store."""
        self.log_operation("journal.write", status, {"path": path, "sections": list(sections)})

    def log_model_event(self, model_name: str, event: str, details: Dict[str, Any] = None, status: str = "success"):
        """Log embedding model lifecycle events."""
        log_details = {"model": model_name}
        if details:
            log_details.update(details)

        self.log_operation(f"model.{event}", status, log_details)

    # Standard logging methods for compatibility
    def info(self, message: str) -> None:
        """Log an info message."""
        self.logger.info(message)

    def warning(self, message: str) -> None:
        """Log a warning message."""
        self.logger.warning(message)

    def error(self, message: str) -> None:
        """Log an error message."""
        self.logger.error(message)

    def debug(self, message: str) -> None:
        """Log a debug message."""
        self.logger.debug(message)


# Global logger instance
logger = StructuredLogger()
