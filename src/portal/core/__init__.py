"""Domain core for the portal: entity models and query specifications."""
