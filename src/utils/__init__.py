"""Utilities package for the ChopChop application."""
