"""Tests for the :mod:`userauth` service."""
