"""Observability module - structured logging and Prometheus metrics."""
