"""Authoritative UDP server, game simulation and message protocol for a multiplayer maze shooter."""

__version__ = "0.1.0"

__all__ = ["__version__"]