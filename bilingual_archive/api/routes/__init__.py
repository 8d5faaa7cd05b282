"""API routes package."""
