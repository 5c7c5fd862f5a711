"""Infrastructure adapters (database, fulfillment provider)."""
