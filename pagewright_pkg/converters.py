"""
Content converters and the registry that selects them by file extension.
"""

from functools import total_ordering

import mistune

from .errors import ConversionError

PRIORITIES = {
    'lowest': -100,
    'low': -10,
    'normal': 0,
    'high': 10,
    'highest': 100,
}

DEFAULT_MARKDOWN_EXT = 'markdown,mkdown,mkdn,mkd,md'


@total_ordering
class Converter:
    """
    Base class for content converters.

    Converters sort by priority, highest first. Converters with the same
    priority sort by class name so the order is total.
    """

    priority = 'normal'

    def __init__(self, config=None):
        self.config = config or {}

    def matches(self, ext):
        raise NotImplementedError

    def output_ext(self, ext):
        raise NotImplementedError

    def convert(self, content):
        raise NotImplementedError

    @property
    def highlighter_prefix(self):
        return self.config.get('highlighter_prefix')

    @property
    def highlighter_suffix(self):
        return self.config.get('highlighter_suffix')

    def _sort_key(self):
        return (-PRIORITIES[self.priority], type(self).__name__)

    def __eq__(self, other):
        if not isinstance(other, Converter):
            return NotImplemented
        return self._sort_key() == other._sort_key()

    def __lt__(self, other):
        if not isinstance(other, Converter):
            return NotImplemented
        return self._sort_key() < other._sort_key()

    def __hash__(self):
        return hash(self._sort_key())

    def __repr__(self):
        return f"<{type(self).__name__} priority={self.priority}>"


class IdentityConverter(Converter):
    """Pass-through converter that applies to every file."""

    priority = 'lowest'

    def matches(self, ext):
        return True

    def output_ext(self, ext):
        return ext

    def convert(self, content):
        return content


class MarkdownConverter(Converter):
    """Convert Markdown to HTML with mistune."""

    priority = 'low'

    def __init__(self, config=None):
        super().__init__(config)
        self.markdown_parser = self.create_markdown_parser()

    def create_markdown_parser(self):
        """Create a Mistune markdown parser with a custom renderer."""
        class CustomRenderer(mistune.HTMLRenderer):
            def __init__(self):
                super().__init__(escape=False)
            def block_code(self, code, info=None):
                escaped_code = mistune.escape(code)
                return '<pre style="white-space: pre-wrap;"><code>{}</code></pre>\n'.format(escaped_code)
        return mistune.create_markdown(
            renderer=CustomRenderer(),
            plugins=['table', 'task_lists', 'strikethrough']
        )

    @property
    def extensions(self):
        raw = self.config.get('markdown_ext') or DEFAULT_MARKDOWN_EXT
        return {f".{ext.strip().lower()}" for ext in raw.split(',') if ext.strip()}

    def matches(self, ext):
        return ext.lower() in self.extensions

    def output_ext(self, ext):
        return '.html'

    def convert(self, content):
        try:
            return self.markdown_parser(content)
        except Exception as e:
            raise ConversionError(f"Markdown conversion failed: {e}", converter=type(self).__name__) from e


class ConverterRegistry:
    """Registered converters, selectable by the extension they handle."""

    def __init__(self, converters=None):
        self._converters = list(converters or [])

    @classmethod
    def default(cls, config=None):
        return cls([MarkdownConverter(config), IdentityConverter(config)])

    def register(self, converter):
        self._converters.append(converter)
        return converter

    def __iter__(self):
        return iter(self._converters)

    def __len__(self):
        return len(self._converters)

    def select(self, ext):
        """Return the converters matching ``ext`` in priority order."""
        return sorted(c for c in self._converters if c.matches(ext))
