"""Utilities: configuration, logging, performance monitoring."""
