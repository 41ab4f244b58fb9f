"""Encoders for metric samples, log entries and raw messages."""
