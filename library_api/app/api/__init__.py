"""HTTP routes of the library service."""
