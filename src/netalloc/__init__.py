"""Local resource allocation for sandbox chain networks."""
