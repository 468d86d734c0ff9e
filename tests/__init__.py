"""Tests for kaktus_monitor."""
