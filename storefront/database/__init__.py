"""
Database package initialization.

The package follows a modular structure:
- base: declarative base and mixins
- connection: async engine, sessions and the FastAPI dependency
- models: ORM models for orders and settings
"""

__all__ = []
