"""Terminal commands for vocabulary practice."""
