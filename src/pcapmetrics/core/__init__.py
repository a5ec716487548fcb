"""Core infrastructure: settings, logging and clock."""
