"""HTTP glue: routers translate requests to service calls."""
