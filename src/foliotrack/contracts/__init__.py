"""Data contracts (JSON Schema documents) for files foliotrack reads and writes."""
