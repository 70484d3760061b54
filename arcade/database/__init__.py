"""Persistence schema for the Arcade engine."""
