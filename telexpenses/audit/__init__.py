"""Audit logging package."""

from telexpenses.audit.logger import AuditLogger, configure_logging

__all__ = ["AuditLogger", "configure_logging"]
