"""Prometheus exporter for Multipass virtual machine instances."""

__version__ = "0.1.0"
