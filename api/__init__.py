"""HTTP middleware, error rendering and the health route."""
