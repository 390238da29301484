#!/usr/bin/env python3
"""
Settings loader for pagewright.
Supports configuration from pagewright.yml, pagewright.yaml, or pagewright.json files.
"""

import os
import sys
import json
import yaml
from typing import Dict, Any, Optional

from .errors import ConfigurationError
from .renderer import OUTPUT_EXT_POLICIES as RENDERER_OUTPUT_EXT_POLICIES


class PagewrightSettings:
    """Load and manage pagewright configuration settings."""

    # Default configuration
    DEFAULT_SETTINGS = {
        'source': '.',
        'layouts_dir': '_layouts',
        'includes_dir': '_includes',
        'posts_dir': '_posts',
        'url': None,
        'baseurl': '',
        'title': None,
        'markdown_ext': 'markdown,mkdown,mkdn,mkd,md',
        'strict_variables': False,
        'liquid_warnings': True,
        'output_ext_policy': 'second_to_last',
        'highlighter_prefix': None,
        'highlighter_suffix': None,
        'excerpt_separator': '\n\n',
        'related_posts_limit': 10,
        'paginate': None,
        'paginate_path': '/page:num/',
        'log_dir': None,
        'log_level': 'INFO',
        'incremental': False,
        'metadata_file': '.pagewright-metadata',
    }

    OUTPUT_EXT_POLICIES = tuple(RENDERER_OUTPUT_EXT_POLICIES)

    # Config file names to look for (in order of preference)
    CONFIG_FILES = ['pagewright.yml', 'pagewright.yaml', 'pagewright.json']

    def __init__(self, config_dir: str = None):
        """
        Initialize settings loader.

        Args:
            config_dir: Directory to look for config files. Defaults to current directory.
        """
        self.config_dir = config_dir or os.getcwd()
        self.settings = self.DEFAULT_SETTINGS.copy()
        self.config_file_path = None

    def load_settings(self, config_file: Optional[str] = None) -> Dict[str, Any]:
        """
        Load settings from configuration file if it exists.

        Args:
            config_file: Explicit config file path. When omitted the config
                directory is searched for one of CONFIG_FILES.

        Returns:
            Dictionary of configuration settings

        Raises:
            ConfigurationError: If an explicit config file is missing, or a
                found config file cannot be parsed or fails validation.
        """
        if config_file and not os.path.exists(config_file):
            raise ConfigurationError(f"Configuration file not found: {config_file}")
        config_file = config_file or self._find_config_file()

        if config_file:
            self.config_file_path = config_file
            loaded_settings = self._load_config_file(config_file)
            if loaded_settings:
                if not isinstance(loaded_settings, dict):
                    raise ConfigurationError(f"Configuration file {config_file} must contain a mapping")
                # Merge with defaults, giving preference to loaded settings
                self.settings.update(loaded_settings)
                print(f"Loaded configuration from: {os.path.relpath(config_file)}", file=sys.stderr)

        self.validate(self.settings)
        return self.settings.copy()

    def _find_config_file(self) -> Optional[str]:
        """
        Find the first available configuration file.

        Returns:
            Path to config file or None if not found
        """
        for filename in self.CONFIG_FILES:
            config_path = os.path.join(self.config_dir, filename)
            if os.path.exists(config_path):
                return config_path
        return None

    def _load_config_file(self, config_path: str) -> Dict[str, Any]:
        """
        Load configuration from a file.

        Args:
            config_path: Path to the configuration file

        Returns:
            Dictionary of configuration settings
        """
        file_ext = os.path.splitext(config_path)[1].lower()
        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                if file_ext in ['.yml', '.yaml']:
                    return yaml.safe_load(f) or {}
                elif file_ext == '.json':
                    return json.load(f) or {}
                else:
                    raise ConfigurationError(f"Unsupported config file format: {file_ext}")
        except PermissionError as e:
            raise ConfigurationError(f"Permission denied reading configuration file: {config_path}") from e
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in configuration file {config_path}: {e}") from e
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Invalid JSON in configuration file {config_path}: {e}") from e
        except (IOError, OSError) as e:
            raise ConfigurationError(f"Error reading configuration file {config_path}: {e}") from e

    def validate(self, settings: Dict[str, Any]) -> None:
        """Reject settings the renderer cannot work with."""
        policy = settings.get('output_ext_policy')
        if policy not in self.OUTPUT_EXT_POLICIES:
            raise ConfigurationError(
                f"Unknown output_ext_policy '{policy}'. Expected one of: {', '.join(self.OUTPUT_EXT_POLICIES)}"
            )
        paginate = settings.get('paginate')
        if paginate is not None and (not isinstance(paginate, int) or paginate < 1):
            raise ConfigurationError(f"paginate must be a positive integer, got {paginate!r}")
        limit = settings.get('related_posts_limit')
        if not isinstance(limit, int) or limit < 0:
            raise ConfigurationError(f"related_posts_limit must be a non-negative integer, got {limit!r}")

    def create_sample_config(self, file_format: str = 'yml') -> str:
        """
        Create a sample configuration file.

        Args:
            file_format: Format for config file ('yml', 'yaml', or 'json')

        Returns:
            Path to created sample config file
        """
        sample_config = {
            'title': 'My Site',
            'url': 'https://example.com',
            'baseurl': '',
            'layouts_dir': '_layouts',
            'includes_dir': '_includes',
            'posts_dir': '_posts',
            'markdown_ext': 'markdown,mkdown,mkdn,mkd,md',
            'strict_variables': False,
            'output_ext_policy': 'second_to_last',
            'paginate': 5,
            'related_posts_limit': 10,
        }

        filename = f'pagewright.{file_format}'
        config_path = os.path.join(self.config_dir, filename)

        try:
            with open(config_path, 'w', encoding='utf-8') as f:
                if file_format in ['yml', 'yaml']:
                    f.write("# pagewright configuration file\n\n")
                    f.write("# Site information\n")
                    f.write("title: My Site\n")
                    f.write("url: https://example.com\n")
                    f.write("baseurl: ''\n\n")
                    f.write("# Source layout\n")
                    f.write("layouts_dir: _layouts\n")
                    f.write("includes_dir: _includes\n")
                    f.write("posts_dir: _posts\n\n")
                    f.write("# Rendering\n")
                    f.write("markdown_ext: markdown,mkdown,mkdn,mkd,md\n")
                    f.write("strict_variables: false\n")
                    f.write("output_ext_policy: second_to_last  # second_to_last, last, first\n\n")
                    f.write("# Posts\n")
                    f.write("paginate: 5\n")
                    f.write("related_posts_limit: 10\n")
                elif file_format == 'json':
                    json.dump(sample_config, f, indent=2)
                else:
                    raise ConfigurationError(f"Unsupported config file format: {file_format}")
        except PermissionError as e:
            raise ConfigurationError(f"Permission denied creating configuration file: {config_path}") from e
        except (IOError, OSError) as e:
            raise ConfigurationError(f"Error writing configuration file {config_path}: {e}") from e

        return config_path

    def merge_with_args(self, args_dict: Dict[str, Any]) -> Dict[str, Any]:
        """
        Merge configuration settings with command-line arguments.
        Command-line arguments take precedence over config file settings.

        Args:
            args_dict: Dictionary of command-line arguments

        Returns:
            Merged configuration dictionary
        """
        merged = self.settings.copy()

        for key, value in args_dict.items():
            if value is not None:
                merged[key] = value

        self.validate(merged)
        return merged
