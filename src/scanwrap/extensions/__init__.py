"""Extension plugins: input protocol."""
