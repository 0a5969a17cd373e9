"""Inbound side: token gate + slash-command dispatch, and the FastAPI adapter around it."""
