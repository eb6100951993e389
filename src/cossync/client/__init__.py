"""Client module - Primitive API client, sync engine and CLI."""
