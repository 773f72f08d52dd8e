"""Capture module."""
