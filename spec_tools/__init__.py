"""Compose, partition and name OpenAPI specifications for code generation."""

__version__ = "0.1.0"
