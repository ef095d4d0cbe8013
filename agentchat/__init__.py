"""Headless model of an agent chat panel: transcript, markdown, asset context, composer and permissions."""

__version__ = "0.1.0"