"""GDA command line interface."""
