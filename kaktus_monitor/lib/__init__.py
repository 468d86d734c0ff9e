"""Reusable helpers for Kaktus Monitor.

These are independent of the portal and can be used in any context.
"""
