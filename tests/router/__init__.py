"""Tests for MikroTik router control."""
