"""Sum-Proof ZKP API."""

__version__ = "0.1.0"
