"""Slash-command decoding and interpretation (no I/O, no event delivery)."""
