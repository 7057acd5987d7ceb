"""Version queries, filtering and selection."""
