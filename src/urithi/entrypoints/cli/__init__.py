"""The ``urithi`` command-line interface."""
