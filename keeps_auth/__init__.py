"""keeps-auth - verification-gated authentication."""

__version__ = "0.1.0"
