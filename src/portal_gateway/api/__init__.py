"""
portal_gateway.api

API package for the portal gateway.

Responsibilities:
- FastAPI app factory and router modules.
- API-layer dependency wiring, error rendering and request/response models.
"""
