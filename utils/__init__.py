"""
Shared utilities: error types, driver error enrichment, JSON serialisation.
"""
