"""Core logic for wct."""
