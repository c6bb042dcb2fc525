"""Triage Hub: request triage and real-time notification fanout."""

__version__ = "0.1.0"
