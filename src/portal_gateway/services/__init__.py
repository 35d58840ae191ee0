"""
portal_gateway.services

Service layer: workspace browsing and the signals document store.
"""
