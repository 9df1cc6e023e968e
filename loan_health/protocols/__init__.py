"""Protocol-specific record parsing."""
