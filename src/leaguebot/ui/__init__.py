"""Embeds, message payloads and persistent views."""
