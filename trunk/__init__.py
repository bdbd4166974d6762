"""Layered configuration, build-stage hooks and staged output for web application bundles."""

__version__ = "0.1.0"