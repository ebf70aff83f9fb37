"""MetaDB CLI: schema-to-documentation generator for game meta class databases."""

__version__ = "1.2.0"
