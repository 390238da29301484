"""
pagewright - the render step of a static site generator.

pagewright takes a page's raw content, renders its template directives
against page and site data, converts it (Markdown via mistune) and wraps
the result in its chain of layouts.
"""

__version__ = "1.0.0"

from .errors import (
    PagewrightError,
    ConfigurationError,
    ConversionError,
    TemplateRenderError,
    NoConverterAvailable,
    Diagnostic,
    TemplateParseWarning,
    MissingLayoutWarning,
)
from .models import Document, Excerpt, Layout, Pager
from .converters import Converter, ConverterRegistry, IdentityConverter, MarkdownConverter
from .layouts import LayoutRegistry, LayoutWalk
from .liquid import LiquidRenderer, RenderContext
from .payload import PayloadBuilder
from .hooks import Hooks
from .regenerator import DependencyTracker
from .renderer import Renderer, RenderResult
from .site import Site

__all__ = [
    'PagewrightError', 'ConfigurationError', 'ConversionError', 'TemplateRenderError',
    'NoConverterAvailable', 'Diagnostic', 'TemplateParseWarning', 'MissingLayoutWarning',
    'Document', 'Excerpt', 'Layout', 'Pager',
    'Converter', 'ConverterRegistry', 'IdentityConverter', 'MarkdownConverter',
    'LayoutRegistry', 'LayoutWalk', 'LiquidRenderer', 'RenderContext',
    'PayloadBuilder', 'Hooks', 'DependencyTracker',
    'Renderer', 'RenderResult', 'Site',
]
