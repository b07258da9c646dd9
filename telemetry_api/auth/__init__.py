"""Módulo de autenticación para endpoints administrativos."""

from .admin_key import require_admin_key

__all__ = ["require_admin_key"]
