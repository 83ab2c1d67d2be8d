"""Shared infrastructure clients."""
