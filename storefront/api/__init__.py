"""HTTP API for the storefront catalog."""
