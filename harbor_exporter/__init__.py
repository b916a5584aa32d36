"""Prometheus exporter for the Harbor registry."""
