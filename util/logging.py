"""
GRC AI Assist - Structured logging
Operation-style log lines for inference dispatch, response normalization and the AI audit trail.
"""

import logging
from typing import Any, Dict, List


class StructuredLogger:
    """Structured logger for AI dispatch, normalization and audit operations."""

    def __init__(self, name: str = "grc_ai", level: int = logging.INFO):
        self.logger = logging.getLogger(name)
        self.logger.setLevel(level)

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

        self.logger.info(message)

    # Prompt dispatch
    def log_inference_request(self, task: str, model: str, prompt: str, expect_structured: bool):
        """Log an outbound generation request."""
        log_details = {
            "task": task,
            "model": model,
            "prompt_length": len(prompt or ""),
            "expect_structured": expect_structured,
        }
        self.log_operation("inference.request", "sent", log_details)

    def log_inference_response(self, model: str, response: str, duration_ms: int):
        """Log a completed generation request."""
        log_details = {
            "model": model,
            "response_length": len(response or ""),
            "duration_ms": duration_ms,
        }
        self.log_operation("inference.response", "success", log_details)

    def log_inference_failure(self, reason: str, detail: str, model: str = None):
        """Log a failed generation request."""
        log_details = {"reason": reason, "detail": sanitize_payload(detail)}
        if model:
            log_details["model"] = model

        message = f"Operation: inference.response, Status: failed, Details: {log_details}"
        self.logger.warning(message)

    # Response normalization
    def log_parse_fallback(self, shape: str, raw_text: str):
        """Log a structured response that had to be replaced by a fallback shape."""
        log_details = {
            "fallback_shape": shape,
            "raw_preview": sanitize_payload(raw_text),
        }
        message = f"Operation: normalizer.parse, Status: fallback, Details: {log_details}"
        self.logger.warning(message)

    # Audit trail
    def log_audit_append(self, entry_id: str, module: str, action: str, user_id: str):
        """Log an entry appended to the AI audit trail."""
        log_details = {
            "entry_id": entry_id,
            "module": module,
            "action": action,
            "user_id": user_id,
        }
        self.log_operation("audit.append", "success", log_details)

    def log_audit_dropped(self, module: str, action: str, reason: str):
        """Log an audit event that could not be enriched and was discarded."""
        log_details = {"module": module, "action": action, "reason": reason}
        message = f"Operation: audit.append, Status: dropped, Details: {log_details}"
        self.logger.warning(message)

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


def get_logger(name: str, level: int = logging.INFO) -> StructuredLogger:
    """Get a structured logger instance."""
    return StructuredLogger(name, level)


def sanitize_payload(payload: Any, max_length: int = 100, redact_fields: List[str] = None) -> Any:
    """Truncate long strings and redact named fields before they reach a log line."""
    if redact_fields is None:
        redact_fields = ['password', 'token', 'secret', 'api_key']

    if isinstance(payload, dict):
        sanitized = {}
        for k, v in payload.items():
            if k in redact_fields:
                sanitized[k] = "[REDACTED]"
            else:
                sanitized[k] = sanitize_payload(v, max_length, redact_fields)
        return sanitized
    elif isinstance(payload, str):
        return payload[:max_length] + "..." if len(payload) > max_length else payload
    elif isinstance(payload, list):
        return [sanitize_payload(item, max_length, redact_fields) for item in payload]
    else:
        return payload
