"""User-facing surfaces built on top of the reference core."""
