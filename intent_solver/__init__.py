"""Intent batch solver: CoW matching and CFMM routing for swap intents."""

__version__ = "0.1.0"
__all__ = ["__version__"]
