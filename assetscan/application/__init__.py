"""Application workflows that orchestrate domain logic and runtime services."""
