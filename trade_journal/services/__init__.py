"""Portfolio engine and journal services."""
