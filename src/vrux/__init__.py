"""VRUX service: AI component generation backend."""

__version__ = "0.1.0"
