"""Utility helpers for todotxt_manager."""
