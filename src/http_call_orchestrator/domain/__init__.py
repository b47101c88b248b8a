"""Pure request-building and response-classification logic."""
