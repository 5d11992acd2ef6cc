"""
Article data model for NewsHub.
"""
from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional

# Incoming records may use the news API's camelCase names
_FIELD_ALIASES = {
    'fullContent': 'full_content',
    'imageUrl': 'image_url',
    'urlToImage': 'image_url',
    'publishedAt': 'published',
}

@dataclass
class Article:
    """
    Represents a stored article. ``url`` is the identity; ``full_content``
    is filled lazily by the content extractor.
    """
    url: str
    title: str = ""
    description: str = ""
    full_content: Optional[str] = None
    author: Optional[str] = None
    source: Optional[str] = None
    image_url: Optional[str] = None
    category: Optional[str] = None
    published: Optional[str] = None

    def has_content(self, min_length: int) -> bool:
        """Whether ``full_content`` is long enough to skip re-extraction."""
        return bool(self.full_content) and len(self.full_content) >= min_length

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Article":
        """
        Build an Article from a loosely shaped mapping.

        Unknown keys are ignored, camelCase aliases are accepted and missing
        or null ``title``/``description`` become empty strings.

        Raises:
            ValueError: If the record has no usable ``url``
        """
        values = {}
        for key, value in data.items():
            name = _FIELD_ALIASES.get(key, key)
            if name in cls.__dataclass_fields__:
                values[name] = value

        url = values.get('url')
        if not url or not isinstance(url, str):
            raise ValueError("Article record is missing a url")
        values['url'] = url.strip()

        for name in ('title', 'description'):
            value = values.get(name)
            values[name] = str(value) if value is not None else ""

        if isinstance(values.get('source'), dict):
            # {"id": ..., "name": ...} as returned by the news API
            values['source'] = values['source'].get('name')

        return cls(**values)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
