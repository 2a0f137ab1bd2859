"""ElectroTech inventory and point-of-sale back office."""

__version__ = "1.0.0"
