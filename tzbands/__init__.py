"""Approximate world timezone explorer built on 15-degree longitude bands."""

__version__ = "0.1.0"
