"""Core infrastructure: exceptions shared across services."""
