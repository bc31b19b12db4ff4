"""Tests for ChopChop."""
