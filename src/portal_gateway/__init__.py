"""
portal_gateway

Top-level package for the workspace portal gateway (Telegram WebApp backend).

Responsibilities:
- Expose package version metadata.
"""

__all__ = ["__version__"]

__version__ = "0.1.0"
