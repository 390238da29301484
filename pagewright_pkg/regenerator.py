"""
Dependency tracking for incremental rebuilds.

Each tracked source path records its modification time and the paths it
depends on (for a document, the layouts it was wrapped in). Metadata is
persisted as YAML between runs.
"""

import logging
import os

import yaml


class DependencyTracker:
    def __init__(self, metadata_file=None, disabled=False):
        self.metadata_file = metadata_file
        self.disabled = disabled
        self.metadata = {}
        self.logger = logging.getLogger('Pagewright')
        self._checked = {}

    def add(self, path):
        """Start tracking ``path`` with its current modification time."""
        if self.disabled or not path:
            return False
        mtime = os.path.getmtime(path) if os.path.exists(path) else None
        entry = self.metadata.setdefault(path, {'mtime': mtime, 'deps': []})
        entry['mtime'] = mtime
        self._checked.pop(path, None)
        return True

    def add_dependency(self, path, dependency):
        """Record that ``path`` must be rebuilt when ``dependency`` changes."""
        if self.disabled:
            return
        if path not in self.metadata:
            self.add(path)
        deps = self.metadata[path]['deps']
        if dependency not in deps:
            deps.append(dependency)
        if dependency not in self.metadata:
            self.add(dependency)

    def dependencies(self, path):
        return list(self.metadata.get(path, {}).get('deps', []))

    def modified(self, path):
        """True if ``path`` or anything it depends on changed since it was recorded."""
        if self.disabled:
            return True
        if path in self._checked:
            return self._checked[path]
        entry = self.metadata.get(path)
        if entry is None or not os.path.exists(path):
            self._checked[path] = True
            return True
        # Guards against dependency cycles while recursing
        self._checked[path] = False
        changed = entry.get('mtime') != os.path.getmtime(path)
        if not changed:
            changed = any(self.modified(dep) for dep in entry.get('deps', []))
        self._checked[path] = changed
        return changed

    def clear(self):
        self.metadata = {}
        self._checked = {}

    def read_metadata(self):
        if not self.metadata_file or not os.path.exists(self.metadata_file):
            return self.metadata
        try:
            with open(self.metadata_file, 'r', encoding='utf-8') as f:
                self.metadata = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            self.logger.error(f"Invalid regeneration metadata in {self.metadata_file}: {e}")
            self.metadata = {}
        self._checked = {}
        return self.metadata

    def write_metadata(self):
        if self.disabled or not self.metadata_file:
            return False
        try:
            with open(self.metadata_file, 'w', encoding='utf-8') as f:
                yaml.safe_dump(self.metadata, f, default_flow_style=False)
            self.logger.debug(f"Wrote regeneration metadata to {self.metadata_file}")
            return True
        except (IOError, OSError, PermissionError) as e:
            self.logger.error(f"Failed to write regeneration metadata {self.metadata_file}: {e}")
            return False
