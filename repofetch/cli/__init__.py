"""repofetch command line interface."""
