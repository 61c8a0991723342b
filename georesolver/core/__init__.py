"""Core building blocks: configuration, logging, errors, geocoding and registry."""
