"""
Liquid-style template rendering on top of Jinja2.

``{{ page.title }}`` and ``{% if %}`` read the same in both languages, so
page and layout bodies are parsed by a shared Jinja2 Environment. Parsed
templates are cached per file and body, and report parse-time warnings
for variables the payload never provides.
"""

import hashlib
import json
import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from jinja2 import (
    Environment,
    FileSystemLoader,
    StrictUndefined,
    TemplateError,
    TemplateSyntaxError,
    Undefined,
    meta,
    pass_context,
)

from .errors import TemplateParseWarning, TemplateRenderError

REGISTERS_KEY = '_registers'

PAYLOAD_ROOTS = frozenset({
    'site',
    'page',
    'layout',
    'content',
    'paginator',
    'highlighter_prefix',
    'highlighter_suffix',
    REGISTERS_KEY,
})


@dataclass
class RenderContext:
    """Execution-scoped registers handed to templates and filters."""

    registers: Dict[str, Any] = field(default_factory=dict)


def _site_config(context):
    registers = context.get(REGISTERS_KEY) or {}
    site = registers.get('site')
    return getattr(site, 'config', None) or {}


@pass_context
def relative_url(context, value):
    baseurl = (_site_config(context).get('baseurl') or '').rstrip('/')
    path = str(value or '')
    if not path.startswith('/'):
        path = '/' + path
    return f"{baseurl}{path}"


@pass_context
def absolute_url(context, value):
    url = (_site_config(context).get('url') or '').rstrip('/')
    return f"{url}{relative_url(context, value)}"


def jsonify(value):
    return json.dumps(value, default=str)


class ParsedTemplate:
    """A compiled template together with the warnings found while parsing it."""

    def __init__(self, template, path, warnings):
        self.template = template
        self.path = path
        self.warnings = warnings

    def render(self, payload, info=None):
        variables = dict(payload)
        variables[REGISTERS_KEY] = info.registers if info is not None else {}
        try:
            return self.template.render(variables)
        except TemplateError as e:
            raise TemplateRenderError(str(e.message or e), path=self.path, lineno=getattr(e, 'lineno', None)) from e


class LiquidFile:
    def __init__(self, renderer, path):
        self.renderer = renderer
        self.path = path

    def parse(self, content):
        return self.renderer.parse(content, self.path)


class LiquidRenderer:
    """Parses and caches templates for the site."""

    def __init__(self, includes_dir=None, strict_variables=False, warn_unknown_variables=True):
        loader = None
        if includes_dir and os.path.isdir(includes_dir):
            loader = FileSystemLoader(includes_dir)
        self.env = Environment(
            loader=loader,
            undefined=StrictUndefined if strict_variables else Undefined,
            keep_trailing_newline=True,
        )
        self.env.filters['relative_url'] = relative_url
        self.env.filters['absolute_url'] = absolute_url
        self.env.filters['jsonify'] = jsonify
        self.warn_unknown_variables = warn_unknown_variables
        self._cache = {}

    def file(self, path):
        return LiquidFile(self, path)

    def reset(self):
        self._cache.clear()

    def parse(self, content, path=None):
        digest = hashlib.sha1(content.encode('utf-8')).hexdigest()
        key = (path, digest)
        if key not in self._cache:
            self._cache[key] = self._compile(content, path)
        return self._cache[key]

    def _compile(self, content, path):
        try:
            ast = self.env.parse(content, filename=path)
            template = self.env.from_string(ast)
        except TemplateSyntaxError as e:
            raise TemplateRenderError(e.message or str(e), path=path, lineno=e.lineno) from e
        except TemplateError as e:
            raise TemplateRenderError(e.message or str(e), path=path) from e
        return ParsedTemplate(template, path, self._warnings_for(ast, path))

    def _warnings_for(self, ast, path) -> List[TemplateParseWarning]:
        if not self.warn_unknown_variables:
            return []
        known = PAYLOAD_ROOTS | set(self.env.globals)
        unknown = sorted(meta.find_undeclared_variables(ast) - known)
        return [
            TemplateParseWarning(f"Variable '{name}' is not provided by the payload", path=path)
            for name in unknown
        ]

    @staticmethod
    def format_error(error, path: Optional[str]) -> str:
        lineno = getattr(error, 'lineno', None)
        message = getattr(error, 'message', None) or str(error)
        if lineno:
            return f"{message} (line {lineno}) in {path}"
        return f"{message} in {path}"
