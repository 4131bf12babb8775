"""Concrete adapters for the service-layer ports (bcrypt, PyJWT, Redis, disk)."""
