"""ChatAIde: Antwortvorschläge für den Chat im aktiven Browser-Tab."""

__version__ = "1.0.0"
