"""Command line interface (``multitool``)."""
