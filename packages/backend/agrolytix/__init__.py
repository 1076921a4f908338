"""Agrolytix backend support: response envelope, error handling, operator tools."""

__version__ = "2.0.0"
