"""Command-line tools for pylxpstream."""
