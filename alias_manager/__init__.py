"""Staged editing of shell alias files."""

__version__ = "0.1.0"
