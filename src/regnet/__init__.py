"""Structural properties and union networks for gene-regulatory networks."""

__version__ = "0.1.0"

__all__ = ["__version__"]
