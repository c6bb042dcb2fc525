"""Connections to external infrastructure (Firestore)."""
