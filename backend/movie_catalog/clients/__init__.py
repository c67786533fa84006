"""Outbound HTTP clients and client-side ports."""
