"""Machine registry backend with category-scoped machine sequence numbering."""
