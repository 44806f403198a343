"""
Observability module.

Provides structured logging and correlation ID tracking.
"""
