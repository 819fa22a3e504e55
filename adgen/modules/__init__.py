"""Generation modules orchestrated by the API gateway."""
