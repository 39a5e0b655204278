"""Notification delivery pipeline with send-time optimization."""
