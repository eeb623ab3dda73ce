"""LinkFolio - link-in-bio profile hosting with click and view analytics."""

__version__ = "1.0.0"
