"""foliotrack command line interface."""
