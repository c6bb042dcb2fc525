"""Configuration: settings loaded from the environment."""
