"""Synthesizes executable API test flows from OpenAPI endpoint metadata."""

__version__ = "0.1.0"
