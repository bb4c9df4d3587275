"""JSON Schema documents, loaded with importlib.resources."""
