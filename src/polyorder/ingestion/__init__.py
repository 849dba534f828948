"""Exchange and index API clients."""
