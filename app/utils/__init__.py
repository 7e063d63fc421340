# ================================
# UTILS PACKAGE INITIALIZATION (utils/__init__.py)
# ================================

"""
Utils Package

Audit logging for business changes
"""

from app.utils.audit import AuditLogger, audit_logger

__all__ = ["AuditLogger", "audit_logger"]
