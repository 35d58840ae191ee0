"""
portal_gateway.auth

Authentication/authorization package.

Responsibilities:
- Telegram WebApp initData signing and verification.
- Single-user access gate and its FastAPI dependency.
"""
