import re
from datetime import datetime, date

import yaml

FRONT_MATTER_RE = re.compile(r'\A---[ \t]*\n(.*?\n?)^(?:---|\.\.\.)[ \t]*$\n?', re.DOTALL | re.MULTILINE)
LIQUID_CONSTRUCT_RE = re.compile(r'({{|{%)')


def deep_merge_hashes(master, other):
    """
    Merge two mappings recursively and return a new dict.

    Values from ``other`` win on conflicting keys, except that two nested
    mappings under the same key are merged rather than replaced. Neither
    argument is modified.
    """
    merged = {}
    for key, value in (master or {}).items():
        merged[key] = deep_merge_hashes(value, {}) if isinstance(value, dict) else value
    for key, value in (other or {}).items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = deep_merge_hashes(merged[key], value)
        elif isinstance(value, dict):
            merged[key] = deep_merge_hashes(value, {})
        else:
            merged[key] = value
    return merged


def parse_front_matter(text):
    """Split a source file into its YAML front matter and body.

    Raises yaml.YAMLError when the front matter block is not valid YAML.
    """
    match = FRONT_MATTER_RE.match(text)
    if not match:
        return {}, text
    metadata = yaml.safe_load(match.group(1))
    if not isinstance(metadata, dict):
        metadata = {}
    return metadata, text[match.end():]


def has_liquid_construct(content):
    """Check whether content contains any template output or tag markers."""
    if not content:
        return False
    return LIQUID_CONSTRUCT_RE.search(content) is not None


def parse_date(date_str):
    """Parse a date string."""
    if isinstance(date_str, datetime):
        return date_str
    elif isinstance(date_str, date):
        return datetime(date_str.year, date_str.month, date_str.day)
    elif isinstance(date_str, str):
        for fmt in ['%Y-%m-%dT%H:%M:%S', '%Y-%m-%d %H:%M:%S', '%Y-%m-%d', '%b %d, %Y']:
            try:
                return datetime.strptime(date_str, fmt)
            except ValueError:
                continue
    return datetime.min


def generate_excerpt(content, separator='\n\n'):
    """Return the part of content before the first excerpt separator."""
    head, _, _ = content.lstrip('\n').partition(separator)
    return head
