"""Prometheus exporter for Presto cluster coordinators."""

__version__ = "0.2.0"
