"""Reporting helpers for the application layer."""
