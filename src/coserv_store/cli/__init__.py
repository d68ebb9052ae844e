"""coserv-store command line interface."""
