"""Marketplace payments: job settlement, deposit limits and earnings reports."""

__version__ = "0.1.0"
