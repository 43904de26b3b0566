"""Operational tooling for the laundromat directory."""
