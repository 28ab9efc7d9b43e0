"""spec-grep command line interface."""
