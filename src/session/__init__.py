"""Session conversation history storage."""
