"""Adapters – SQLAlchemy event store and FastAPI ingress."""
