"""Shared infrastructure: settings, logging and exceptions."""
