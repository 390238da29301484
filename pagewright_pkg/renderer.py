"""
Render pipeline for a single document.

A Renderer converts a document's content through the matching converters,
renders template directives against the page/site payload and wraps the
result in the document's chain of layouts.
"""

import posixpath
from dataclasses import dataclass, field
from typing import Any, List, Optional

from .errors import ConfigurationError, Diagnostic, MissingLayoutWarning
from .layouts import LayoutWalk
from .liquid import LiquidRenderer, RenderContext
from .payload import PayloadBuilder


def second_to_last_ext(exts):
    """
    Pick the extension of the converter before the last one.

    Heuristic: the last converter is usually the pass-through identity
    stage, so the meaningful extension is the one before it. Chains of
    more than two converters are not handled correctly.
    """
    if len(exts) == 1:
        return exts[-1]
    return exts[-2]


OUTPUT_EXT_POLICIES = {
    'second_to_last': second_to_last_ext,
    'last': lambda exts: exts[-1],
    'first': lambda exts: exts[0],
}


@dataclass
class RenderResult:
    """Outcome of ``Renderer.try_render``: either output or the error that stopped it."""

    document: Any
    output: Optional[str] = None
    error: Optional[BaseException] = None
    diagnostics: List[Diagnostic] = field(default_factory=list)

    @property
    def ok(self):
        return self.error is None

    @property
    def error_kind(self):
        return type(self.error).__name__ if self.error is not None else None


class Renderer:
    def __init__(self, site, document, site_payload=None, layouts=None, logger=None):
        """
        Args:
            site: Site providing converters, the liquid renderer, hooks and
                the dependency tracker.
            document: The document to render.
            site_payload: Base payload to build from. Defaults to
                ``site.site_payload()``.
            layouts: Layout registry. Defaults to ``site.layouts``.
            logger: Logger for progress, warnings and errors. Defaults to
                ``site.logger``.
        """
        self.site = site
        self.document = document
        self.site_payload = site_payload
        self.layouts = layouts if layouts is not None else site.layouts
        self.logger = logger or site.logger
        self.diagnostics = []
        self.payload = None
        self.info = None
        self._converters = None
        self._output_ext = None
        self._output_exts = None

    @property
    def converters(self):
        """Converters matching the document's extension, fixed for this renderer."""
        if self._converters is None:
            self._converters = self.site.converters.select(self.document.extname)
        return self._converters

    @property
    def output_ext(self):
        """The extension of the rendered file, including the leading period."""
        if self._output_ext is None:
            self._output_ext = self.permalink_ext() or self.converter_output_ext()
        return self._output_ext

    def run(self):
        """Build the payload, run pre-render hooks and render the document's templating."""
        document = self.document
        self.logger.debug(f"Rendering: {document.relative_path}")

        base = self.site_payload if self.site_payload is not None else self.site.site_payload()
        self.payload = PayloadBuilder(base).build(document, self.converters, self.output_ext)

        self.logger.debug(f"Pre-Render Hooks: {document.relative_path}")
        self.trigger_hooks('pre_render', self.payload)

        self.info = RenderContext(registers={'site': self.site, 'page': self.payload['page']})

        output = document.content
        if document.render_with_liquid:
            self.logger.debug(f"Rendering Liquid: {document.relative_path}")
            output = self.render_liquid(output, self.payload, self.info, document.path)

        document.output = output
        return output

    def render_document(self):
        """Run the whole chain: templating, conversion and layouts."""
        document = self.document
        output = self.run()

        self.logger.debug(f"Rendering Markup: {document.relative_path}")
        output = self.convert(output)
        document.output = output
        self.payload['page']['content'] = output
        self.trigger_hooks('post_convert')

        if document.place_in_layout:
            self.logger.debug(f"Rendering Layout: {document.relative_path}")
            output = self.place_in_layouts(output, self.payload, self.info)

        document.output = output
        self.trigger_hooks('post_render')
        return output

    def try_render(self):
        """Like ``render_document`` but returns a RenderResult instead of raising."""
        try:
            output = self.render_document()
        except Exception as e:
            return RenderResult(self.document, error=e, diagnostics=list(self.diagnostics))
        return RenderResult(self.document, output=output, diagnostics=list(self.diagnostics))

    def convert(self, content):
        """Pass content through each matching converter in order."""
        output = content
        for converter in self.converters:
            try:
                output = converter.convert(output)
            except Exception as e:
                self.logger.error(
                    f"Conversion error: {type(converter).__name__} encountered an error while "
                    f"converting '{self.document.relative_path}':"
                )
                self.logger.error(str(e))
                raise
        return output

    def render_liquid(self, content, payload, info, path=None):
        """Render content with the payload and info. Parse warnings are logged, errors re-raised."""
        location = path or self.document.relative_path
        try:
            template = self.site.liquid_renderer.file(path).parse(content)
            for warning in template.warnings:
                self.warn(warning, f"Liquid Warning: {LiquidRenderer.format_error(warning, location)}")
            return template.render(payload, info)
        except Exception as e:
            self.logger.error(f"Liquid Exception: {LiquidRenderer.format_error(e, location)}")
            raise

    def invalid_layout(self, layout):
        """True when the document names a layout that does not exist."""
        return (
            self.document.layout_name is not None
            and layout is None
            and not self.document.is_excerpt
        )

    def place_in_layouts(self, content, payload, info):
        """Render the document's layouts, innermost first, around content."""
        document = self.document
        layout = self.layouts[document.layout_name]

        if self.invalid_layout(layout):
            message = f"Layout '{document.layout_name}' requested in {document.relative_path} does not exist."
            self.warn(MissingLayoutWarning(message, path=document.relative_path), f"Build Warning: {message}")

        walk = LayoutWalk.start(content, layout)

        # Layout data starts fresh for every page
        payload['layout'] = {}

        while not walk.done:
            walk = walk.enter()
            payload['content'] = walk.output
            payload['layout'] = walk.metadata

            output = self.render_liquid(walk.layout.content, payload, info, walk.layout.relative_path)
            self.add_dependency(walk.layout)

            walk = walk.step(output, self.layouts)

        return walk.output

    def add_dependency(self, layout):
        if self.document.write:
            self.site.regenerator.add_dependency(
                self.site.in_source_dir(self.document.path),
                self.site.in_source_dir(layout.path),
            )

    def trigger_hooks(self, event, *args):
        for owner in self.document.hook_owners:
            self.site.hooks.trigger(owner, event, self.document, *args)

    def warn(self, diagnostic, message):
        self.diagnostics.append(diagnostic)
        self.logger.warning(message)

    def permalink_ext(self):
        permalink = self.document.permalink
        if permalink and not permalink.endswith('/'):
            ext = posixpath.splitext(permalink)[1]
            if ext:
                return ext
        return None

    def converter_output_ext(self):
        exts = self.output_exts()
        if not exts:
            return self.document.extname
        policy_name = self.site.config.get('output_ext_policy') or 'second_to_last'
        policy = OUTPUT_EXT_POLICIES.get(policy_name)
        if policy is None:
            raise ConfigurationError(f"Unknown output_ext_policy: {policy_name}")
        return policy(exts)

    def output_exts(self):
        if self._output_exts is None:
            exts = (c.output_ext(self.document.extname) for c in self.converters)
            self._output_exts = [ext for ext in exts if ext]
        return self._output_exts
