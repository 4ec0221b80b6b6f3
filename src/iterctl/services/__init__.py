"""Service layer: timeline planning, materialization, and project sync."""
