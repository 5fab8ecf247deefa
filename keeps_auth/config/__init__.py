"""Configuration - environment-driven settings."""
