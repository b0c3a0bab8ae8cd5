"""HTTP clients for the external providers."""
