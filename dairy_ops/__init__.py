"""Subscription scheduling and wallet settlement backend for dairy deliveries."""

__version__ = "0.1.0"
