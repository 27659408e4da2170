"""Face attendance service."""
