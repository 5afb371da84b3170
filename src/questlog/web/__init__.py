"""Web API for Questlog."""
