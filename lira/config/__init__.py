"""Configuration package for the colony simulation."""
