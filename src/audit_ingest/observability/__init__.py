"""Observability – logging and health checks."""
