"""Click commands for wct."""
