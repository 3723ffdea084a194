"""Telegram transport."""
