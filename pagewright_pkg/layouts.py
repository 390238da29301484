"""
Layout registry and the walk that composes a chain of layouts.
"""

import logging
import os
from dataclasses import dataclass, field, replace
from typing import Any, Dict, FrozenSet, Optional

from .models import Layout
from .utils import deep_merge_hashes


class LayoutRegistry:
    """Site-wide layouts keyed by name (basename without extension)."""

    def __init__(self, layouts=None):
        self._layouts = dict(layouts or {})
        self.logger = logging.getLogger('Pagewright')

    @classmethod
    def from_directory(cls, layouts_dir, source_dir=None):
        registry = cls()
        registry.load(layouts_dir, source_dir)
        return registry

    def load(self, layouts_dir, source_dir=None):
        """Read every layout file under ``layouts_dir``."""
        if not layouts_dir or not os.path.isdir(layouts_dir):
            self.logger.debug(f"No layouts directory at {layouts_dir}")
            return
        source_dir = source_dir or os.path.dirname(os.path.abspath(layouts_dir))
        for root, _, files in os.walk(layouts_dir):
            for file in sorted(files):
                if file.startswith('.'):
                    continue
                layout = Layout.from_file(os.path.join(root, file), source_dir)
                if layout.name in self._layouts:
                    self.logger.warning(f"Layout '{layout.name}' defined more than once, using {layout.relative_path}")
                self._layouts[layout.name] = layout
                self.logger.debug(f"Loaded layout: {layout.name}")

    def add(self, layout):
        self._layouts[layout.name] = layout
        return layout

    def lookup(self, name):
        if not isinstance(name, str):
            return None
        return self._layouts.get(name)

    def __getitem__(self, name):
        return self.lookup(name)

    def __contains__(self, name):
        return self.lookup(name) is not None

    def __iter__(self):
        return iter(self._layouts)

    def __len__(self):
        return len(self._layouts)


@dataclass(frozen=True)
class LayoutWalk:
    """
    State of one layout composition run.

    ``layout`` is the layout about to be applied (None once the walk is
    over), ``visited`` holds every layout entered so far, ``output`` is the
    content produced by the last application, and ``metadata`` is the
    layout data accumulated across the chain.
    """

    layout: Optional[Layout]
    visited: FrozenSet[Layout] = frozenset()
    output: str = ''
    metadata: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def start(cls, content, layout):
        visited = frozenset([layout]) if layout is not None else frozenset()
        return cls(layout=layout, visited=visited, output=content)

    @property
    def done(self):
        return self.layout is None

    def enter(self):
        """Merge the current layout's data under what earlier layouts set."""
        return replace(self, metadata=deep_merge_hashes(self.layout.data, self.metadata))

    def step(self, output, registry):
        """Record ``output`` and move to the parent layout, stopping on a cycle."""
        parent = registry.lookup(self.layout.parent_name)
        if parent is None or parent in self.visited:
            return replace(self, layout=None, output=output)
        return replace(self, layout=parent, visited=self.visited | {parent}, output=output)
