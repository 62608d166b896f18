"""Scan IPv4 networks for Minecraft servers and store their status responses."""

__version__ = "0.1.0"