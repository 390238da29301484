"""
Source units the render pipeline works on: documents, their excerpts,
layouts and pagination state.
"""

import logging
import math
import os
import re
from datetime import datetime

import yaml

from .errors import PagewrightError
from .utils import parse_front_matter, has_liquid_construct, parse_date, generate_excerpt

DATE_FILENAME_RE = re.compile(r'^(\d{4}-\d{2}-\d{2})-(.*)$')
YAML_EXTENSIONS = ('.yml', '.yaml')

logger = logging.getLogger('Pagewright')


def read_source_file(path):
    """Read a source file and split off its front matter.

    Invalid YAML is logged and the whole file is treated as content.
    A file that is not UTF-8 raises PagewrightError naming the path.
    """
    try:
        with open(path, 'r', encoding='utf-8') as f:
            text = f.read()
    except UnicodeDecodeError as e:
        raise PagewrightError(f"Cannot read {path}: not valid UTF-8 ({e.reason} at byte {e.start})") from e
    try:
        return parse_front_matter(text)
    except yaml.YAMLError as e:
        logger.error(f"Invalid YAML front matter in {path}: {e}")
        return {}, text


class Document:
    """A single content file plus its front matter."""

    excerpt_separator = '\n\n'

    def __init__(self, path, relative_path, content, data=None, collection=None,
                 pager=None, related_posts=None, write=True):
        self.path = path
        self.relative_path = relative_path
        self.content = content
        self.data = data if data is not None else {}
        self.collection = collection
        self.pager = pager
        self.related_posts = related_posts if related_posts is not None else []
        self.write = write
        # Resolved content, set by the renderer
        self.output = None

    @classmethod
    def from_file(cls, path, source_dir, collection=None):
        data, content = read_source_file(path)
        relative_path = os.path.relpath(path, source_dir).replace(os.sep, '/')
        return cls(os.path.abspath(path), relative_path, content, data, collection)

    def __repr__(self):
        return f"<Document {self.relative_path}>"

    @property
    def extname(self):
        return os.path.splitext(self.path)[1]

    @property
    def basename_without_ext(self):
        return os.path.splitext(os.path.basename(self.path))[0]

    @property
    def slug(self):
        match = DATE_FILENAME_RE.match(self.basename_without_ext)
        if match and self.collection == 'posts':
            return match.group(2)
        return self.data.get('slug') or self.basename_without_ext

    @property
    def permalink(self):
        value = self.data.get('permalink')
        return value if isinstance(value, str) and value else None

    @property
    def layout_name(self):
        return self.data.get('layout')

    @property
    def date(self):
        """Front matter date, falling back to the YYYY-MM-DD filename prefix."""
        parsed = parse_date(self.data.get('date'))
        if parsed == datetime.min:
            match = DATE_FILENAME_RE.match(self.basename_without_ext)
            if match:
                parsed = parse_date(match.group(1))
        return parsed

    @property
    def is_excerpt(self):
        return False

    @property
    def is_yaml_file(self):
        return self.extname.lower() in YAML_EXTENSIONS

    @property
    def no_layout(self):
        return self.data.get('layout') == 'none'

    @property
    def render_with_liquid(self):
        if self.data.get('render_with_liquid') is False or self.is_yaml_file:
            return False
        return has_liquid_construct(self.content)

    @property
    def place_in_layout(self):
        return not (self.is_yaml_file or self.no_layout)

    @property
    def hook_owners(self):
        if self.collection == 'posts':
            return ('documents', 'posts')
        if self.collection:
            return ('documents',)
        return ('pages',)

    def url(self, output_ext=None):
        """The URL the document is published under."""
        if self.permalink:
            return self.permalink
        ext = output_ext if output_ext is not None else self.extname
        if self.collection == 'posts' and self.date != datetime.min:
            return f"/{self.date:%Y/%m/%d}/{self.slug}{ext}"
        stem = os.path.splitext(self.relative_path)[0]
        if ext == '.html' and os.path.basename(stem) == 'index':
            stem = os.path.dirname(stem)
            return f"/{stem}/" if stem else '/'
        return f"/{stem}{ext}"

    def excerpt(self, separator=None):
        return Excerpt(self, separator or self.excerpt_separator)

    def to_liquid(self, output_ext=None):
        """The mapping templates see as ``page``."""
        liquid = dict(self.data)
        liquid.update({
            'url': self.url(output_ext),
            'path': self.relative_path,
            'relative_path': self.relative_path,
            'content': self.content,
            'output_ext': output_ext,
            'collection': self.collection,
            'slug': self.slug,
        })
        if self.date != datetime.min:
            liquid['date'] = self.date
        if 'excerpt' not in self.data:
            liquid['excerpt'] = self.excerpt().content
        return liquid


class Excerpt(Document):
    """The leading part of a document, rendered on its own."""

    def __init__(self, doc, separator='\n\n'):
        super().__init__(
            doc.path,
            f"{doc.relative_path}/#excerpt",
            generate_excerpt(doc.content, separator),
            doc.data,
            doc.collection,
            write=False,
        )
        self.doc = doc

    @property
    def is_excerpt(self):
        return True

    @property
    def date(self):
        return self.doc.date

    @property
    def slug(self):
        return self.doc.slug

    def url(self, output_ext=None):
        return self.doc.url(output_ext)

    def to_liquid(self, output_ext=None):
        liquid = dict(self.data)
        liquid.update({
            'url': self.url(output_ext),
            'path': self.relative_path,
            'content': self.content,
            'output_ext': output_ext,
        })
        return liquid


class Layout:
    """A named template that wraps rendered content."""

    def __init__(self, name, path, relative_path, content, data=None):
        self.name = name
        self.path = path
        self.relative_path = relative_path
        self.content = content
        self.data = data if data is not None else {}

    @classmethod
    def from_file(cls, path, source_dir):
        data, content = read_source_file(path)
        name = os.path.splitext(os.path.basename(path))[0]
        relative_path = os.path.relpath(path, source_dir).replace(os.sep, '/')
        return cls(name, os.path.abspath(path), relative_path, content, data)

    @property
    def parent_name(self):
        return self.data.get('layout')

    def __repr__(self):
        return f"<Layout {self.name}>"


def pagination_links(current_page, total_pages):
    """
    Returns a list of page numbers (or ellipses) to display in pagination.
    Always shows page 1 and total_pages.
    Shows two pages before and after the current page.
    Inserts '...' when there is a gap.
    """
    delta = 2
    links = [1]

    start = max(current_page - delta, 2)
    end = min(current_page + delta, total_pages - 1)

    if start > 2:
        links.append('...')

    links.extend(range(start, end + 1))

    if end < total_pages - 1:
        links.append('...')

    if total_pages > 1:
        links.append(total_pages)

    return links


class Pager:
    """One page of a paginated post listing."""

    def __init__(self, posts, page, per_page, paginate_path='/page:num/'):
        if per_page < 1:
            raise ValueError(f"per_page must be positive, got {per_page}")
        self.per_page = per_page
        self.paginate_path = paginate_path
        self.total_posts = len(posts)
        self.total_pages = max(1, math.ceil(self.total_posts / per_page))
        if page < 1 or page > self.total_pages:
            raise ValueError(f"Page {page} is outside 1..{self.total_pages}")
        self.page = page
        start = (page - 1) * per_page
        self.posts = list(posts[start:start + per_page])
        self.previous_page = page - 1 if page > 1 else None
        self.next_page = page + 1 if page < self.total_pages else None

    def path_for(self, num):
        if num is None:
            return None
        if num == 1:
            return '/'
        return self.paginate_path.replace(':num', str(num))

    def to_liquid(self):
        return {
            'page': self.page,
            'per_page': self.per_page,
            'posts': self.posts,
            'total_posts': self.total_posts,
            'total_pages': self.total_pages,
            'previous_page': self.previous_page,
            'previous_page_path': self.path_for(self.previous_page),
            'next_page': self.next_page,
            'next_page_path': self.path_for(self.next_page),
            'links': pagination_links(self.page, self.total_pages),
        }
