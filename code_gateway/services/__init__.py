"""
Service layer for the Code Gateway.

This module orchestrates quota-gated code generation and snippet history.
"""

from code_gateway.services.code_service import CodeService

__all__ = ["CodeService"]
