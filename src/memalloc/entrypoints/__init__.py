"""Entrypoints: command-line interface."""
