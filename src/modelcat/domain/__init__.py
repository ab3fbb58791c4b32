"""Domain layer: record model, build pipeline stages and runtime queries."""
