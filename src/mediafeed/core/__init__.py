"""Configuration and error taxonomy."""
