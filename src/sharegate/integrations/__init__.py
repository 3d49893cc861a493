"""Optional integrations with web frameworks."""
