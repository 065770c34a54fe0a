"""Core infrastructure: configuration, logging, session and validation."""
