"""Preparation of combined meta-analyses for forest plot display."""

__version__ = "0.1.0"
