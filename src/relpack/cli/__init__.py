"""relpack command-line interface."""
