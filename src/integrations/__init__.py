"""Remote platform integrations."""
