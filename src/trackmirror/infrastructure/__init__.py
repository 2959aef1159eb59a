"""Infrastructure layer: HTTP clients, parsers, providers, persistence."""
