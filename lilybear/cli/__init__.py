"""CLI module for lilybear."""
