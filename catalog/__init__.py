"""Product catalog service for the e-commerce backend."""
