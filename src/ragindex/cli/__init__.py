"""ragindex command-line interface."""
