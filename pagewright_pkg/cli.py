#!/usr/bin/env python3
"""
Command-line interface for pagewright: render one source file through
templating, converters and layouts.
"""

import os
import sys
import argparse
import time
from typing import List, Optional

from .errors import PagewrightError
from .settings import PagewrightSettings
from .site import Site

SETTING_ARGS = ('source', 'layouts_dir', 'includes_dir', 'posts_dir', 'url', 'baseurl',
                'output_ext_policy', 'log_dir', 'log_level', 'strict_variables')


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='pagewright - render a page through its layouts')
    parser.add_argument('file', nargs='?',
                        help='Source file to render')
    parser.add_argument('--config', type=str,
                        help='Configuration file (defaults to pagewright.yml in the current directory)')
    parser.add_argument('--source', type=str,
                        help='Source directory containing layouts, includes and posts')
    parser.add_argument('--layouts', dest='layouts_dir', type=str,
                        help='Layouts directory, relative to the source directory')
    parser.add_argument('--includes', dest='includes_dir', type=str,
                        help='Includes directory, relative to the source directory')
    parser.add_argument('--posts', dest='posts_dir', type=str,
                        help='Posts directory, relative to the source directory')
    parser.add_argument('--url', type=str, help='Site URL used by absolute_url')
    parser.add_argument('--baseurl', type=str, help='Base path used by relative_url')
    parser.add_argument('--output-ext-policy', dest='output_ext_policy', type=str,
                        choices=list(PagewrightSettings.OUTPUT_EXT_POLICIES),
                        help='How to pick the output extension from a converter chain')
    parser.add_argument('--strict', dest='strict_variables', action='store_true', default=None,
                        help='Fail on undefined template variables')
    parser.add_argument('--log-dir', dest='log_dir', type=str,
                        help='Directory for debug log files')
    parser.add_argument('--verbose', dest='log_level', action='store_const', const='DEBUG',
                        help='Log debug messages')
    parser.add_argument('-o', '--output', type=str,
                        help='Write the rendered page here instead of standard output')
    parser.add_argument('--init', type=str, choices=['yml', 'yaml', 'json'],
                        help='Create a sample configuration file')
    parser.add_argument('--version', action='version', version='%(prog)s 1.0.0')
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.init:
        config_path = PagewrightSettings().create_sample_config(args.init)
        print(f"Created sample configuration file: {config_path}")
        return 0

    if not args.file:
        parser.error('a source file is required')

    start_time = time.time()
    try:
        settings_loader = PagewrightSettings()
        settings_loader.load_settings(args.config)

        args_dict = {k: v for k, v in vars(args).items() if k in SETTING_ARGS and v is not None}
        final_settings = settings_loader.merge_with_args(args_dict)

        site = Site(final_settings)
        site.read()
        document = site.read_document(args.file)
        output = site.render(document)

        if args.output:
            output_dir = os.path.dirname(os.path.abspath(args.output))
            os.makedirs(output_dir, exist_ok=True)
            with open(args.output, 'w', encoding='utf-8') as f:
                f.write(output)
        else:
            sys.stdout.write(output)

        site.regenerator.write_metadata()
        site.logger.info(f"Render completed in {time.time() - start_time:.6f} seconds.")
    except (PagewrightError, IOError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == '__main__':
    sys.exit(main())
