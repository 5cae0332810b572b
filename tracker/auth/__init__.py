"""Bearer-token authentication for the JSON API."""
