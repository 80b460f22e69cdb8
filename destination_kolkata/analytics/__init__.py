"""In-process search analytics: raw events and their aggregation."""
