"""ChopChop application package."""
