"""Test configuration and fixtures for pagewright tests."""

import pytest
import tempfile
import shutil
import os
import sys
from pathlib import Path

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from pagewright_pkg.converters import Converter
from pagewright_pkg.models import Document, Layout
from pagewright_pkg.layouts import LayoutRegistry
from pagewright_pkg.site import Site


class RecordingConverter(Converter):
    """Converter used in tests: appends a marker and remembers its inputs."""

    priority = 'normal'
    ext = '.html'
    marker = ''

    def __init__(self, config=None):
        super().__init__(config)
        self.calls = []

    def matches(self, ext):
        return True

    def output_ext(self, ext):
        return self.ext

    def convert(self, content):
        self.calls.append(content)
        return content + self.marker


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    temp_dir = tempfile.mkdtemp()
    yield temp_dir
    shutil.rmtree(temp_dir, ignore_errors=True)


@pytest.fixture
def mock_source_dir(temp_dir):
    """Create a mock source directory with layouts, includes and posts."""
    source_dir = Path(temp_dir) / 'site'
    layouts_dir = source_dir / '_layouts'
    includes_dir = source_dir / '_includes'
    posts_dir = source_dir / '_posts'

    layouts_dir.mkdir(parents=True)
    includes_dir.mkdir()
    posts_dir.mkdir()

    (layouts_dir / 'default.html').write_text(
        "---\ntitle: Default Layout\n---\n<html>{{ content }}</html>"
    )
    (layouts_dir / 'post.html').write_text(
        "---\nlayout: default\n---\n<article>{{ content }}</article>"
    )
    (includes_dir / 'nav.html').write_text("<nav>menu</nav>")

    (posts_dir / '2024-01-02-hello.md').write_text(
        "---\ntitle: Hello\nlayout: post\n---\n# {{ page.title }}\n"
    )
    (posts_dir / '2023-06-01-older.md').write_text(
        "---\ntitle: Older\nlayout: post\n---\nAn older post.\n"
    )
    (posts_dir / '2022-03-04-draft.md').write_text(
        "---\ntitle: Draft\npublished: false\n---\nNot ready.\n"
    )

    (source_dir / 'about.html').write_text(
        "---\ntitle: About\nlayout: default\n---\n{% include 'nav.html' %}<p>{{ page.title }}</p>"
    )
    (source_dir / 'index.html').write_text(
        "---\nlayout: default\n---\n{% for post in paginator.posts %}[{{ post.title }}]{% endfor %}"
    )

    return str(source_dir)


@pytest.fixture
def site(temp_dir):
    """A site without any source files, for driving the renderer directly."""
    return Site({'source': temp_dir})


@pytest.fixture
def loaded_site(mock_source_dir):
    """A site that has read the mock source directory."""
    site = Site({'source': mock_source_dir, 'incremental': True})
    site.read()
    return site


@pytest.fixture
def make_document(temp_dir):
    """Build an in-memory document inside the temp directory."""
    def factory(content, data=None, name='page.html', collection=None, **kwargs):
        path = os.path.join(temp_dir, name)
        return Document(path, name, content, data or {}, collection, **kwargs)
    return factory


@pytest.fixture
def make_layouts(temp_dir):
    """Build a layout registry from (name, body, data) tuples."""
    def factory(*entries):
        registry = LayoutRegistry()
        for name, body, data in entries:
            path = os.path.join(temp_dir, '_layouts', f'{name}.html')
            registry.add(Layout(name, path, f'_layouts/{name}.html', body, data))
        return registry
    return factory
