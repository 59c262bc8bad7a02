"""Package parts, cell operations and response dispatch."""
