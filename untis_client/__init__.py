"""Client for the WebUntis JSON-RPC API."""
