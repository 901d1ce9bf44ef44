"""
Prompt Directives - Observability.

JSONL audit trail of engine decisions, enabled via
PROMPT_DIRECTIVES_AUDIT_LOG_ENABLED.
"""

from prompt_directives.observability.audit_log import AuditLogger

__all__ = ["AuditLogger"]
