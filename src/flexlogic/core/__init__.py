"""Session weight-planning engine: pure functions over session values."""
