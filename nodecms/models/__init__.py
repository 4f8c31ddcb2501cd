"""Models package — import all models so metadata.create_all can discover them."""

from nodecms.models.document import Document

__all__ = ["Document"]
