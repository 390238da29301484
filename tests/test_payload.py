"""Tests for PayloadBuilder."""

import os
import sys

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from pagewright_pkg.converters import IdentityConverter, MarkdownConverter
from pagewright_pkg.errors import NoConverterAvailable
from pagewright_pkg.models import Pager
from pagewright_pkg.payload import PayloadBuilder


class TestPayloadBuilder:
    """Test cases for payload assembly."""

    def test_page_projection(self, make_document):
        """page carries front matter plus computed fields."""
        document = make_document('body', {'title': 'T'}, name='about.md')
        payload = PayloadBuilder({}).build(document, [IdentityConverter()], '.html')

        assert payload['page']['title'] == 'T'
        assert payload['page']['url'] == '/about.html'
        assert payload['page']['output_ext'] == '.html'
        assert payload['page']['content'] == 'body'

    def test_related_posts_do_not_leak(self, make_document):
        """A page rendered after a post gets related_posts cleared."""
        base = {'site': {'title': 'Site', 'related_posts': ['stale']}}
        builder = PayloadBuilder(base)
        post = make_document('p', name='post.md', collection='posts', related_posts=[{'title': 'Other'}])
        page = make_document('q', name='page.md')

        post_payload = builder.build(post, [IdentityConverter()])
        page_payload = builder.build(page, [IdentityConverter()])

        assert post_payload['site']['related_posts'] == [{'title': 'Other'}]
        assert page_payload['site']['related_posts'] is None
        assert page_payload['site']['title'] == 'Site'
        assert base['site']['related_posts'] == ['stale']

    def test_paginator_only_with_pager(self, make_document):
        """paginator is present only for documents that paginate."""
        builder = PayloadBuilder({'site': {}, 'paginator': {'page': 99}})
        plain = make_document('x')
        paged = make_document('x', pager=Pager([{'title': 'a'}, {'title': 'b'}], 1, 1))

        assert 'paginator' not in builder.build(plain, [IdentityConverter()])
        paginator = builder.build(paged, [IdentityConverter()])['paginator']
        assert paginator['page'] == 1
        assert paginator['total_pages'] == 2
        assert paginator['posts'] == [{'title': 'a'}]

    def test_highlighter_markers_from_first_converter(self, make_document):
        """The first converter in order supplies the highlighter markers."""
        first = MarkdownConverter({'highlighter_prefix': '<div class="hl">', 'highlighter_suffix': '</div>'})
        payload = PayloadBuilder({}).build(make_document('x'), [first, IdentityConverter()])
        assert payload['highlighter_prefix'] == '<div class="hl">'
        assert payload['highlighter_suffix'] == '</div>'

    def test_no_converters(self, make_document):
        """Highlighter lookup on an empty converter list fails."""
        with pytest.raises(NoConverterAvailable, match=r"\.html"):
            PayloadBuilder({}).build(make_document('x'), [])

    def test_fresh_payload_each_build(self, make_document):
        """Mutating one payload leaves the next build untouched."""
        builder = PayloadBuilder({'site': {'title': 'Site'}})
        first = builder.build(make_document('x'), [IdentityConverter()])
        first['site']['title'] = 'Mutated'
        first['content'] = 'leftover'
        second = builder.build(make_document('x'), [IdentityConverter()])
        assert second['site']['title'] == 'Site'
        assert 'content' not in second

    def test_nested_site_values_are_copied(self, make_document):
        """Nested lists under site are per build, so mutating one never reaches the base."""
        base = {'site': {'tags': [], 'data': {'menu': ['home']}}}
        builder = PayloadBuilder(base)

        first = builder.build(make_document('x'), [IdentityConverter()])
        first['site']['tags'].append('leaked')
        first['site']['data']['menu'].append('leaked')

        second = builder.build(make_document('x'), [IdentityConverter()])
        assert second['site']['tags'] == []
        assert second['site']['data']['menu'] == ['home']
        assert base == {'site': {'tags': [], 'data': {'menu': ['home']}}}
