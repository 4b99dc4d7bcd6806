"""
Output format utilities for repoget CLI commands.

Formats records (repository listings, get results) as JSONL, JSON,
YAML, CSV or TSV.
"""

import csv
import io
import json
import os
from typing import Any, Dict, Iterator, List, Optional

import yaml

FORMATS = ('json', 'jsonl', 'csv', 'tsv', 'yaml')


def format_output(data: Iterator[Dict[str, Any]], format: str,
                  fields: Optional[List[str]] = None) -> Iterator[str]:
    """
    Format data according to the specified format.

    Args:
        data: Iterator of dictionaries to format
        format: Output format (json, jsonl, csv, tsv, yaml)
        fields: Optional list of fields to include (for CSV/TSV)

    Yields:
        Formatted strings for output
    """
    if format == "jsonl":
        for item in data:
            yield json.dumps(item, ensure_ascii=False)
    elif format == "json":
        yield json.dumps(list(data), ensure_ascii=False, indent=2)
    elif format == "yaml":
        yield yaml.dump(list(data), default_flow_style=False, allow_unicode=True, sort_keys=False)
    elif format == "csv":
        yield from format_delimited(data, fields, ',')
    elif format == "tsv":
        yield from format_delimited(data, fields, '\t')
    else:
        raise ValueError(f"Unknown format: {format}")


def format_delimited(data: Iterator[Dict[str, Any]], fields: Optional[List[str]],
                     delimiter: str) -> Iterator[str]:
    """CSV/TSV with a header row. Columns default to every flattened key, sorted."""
    rows = [flatten_dict(item) for item in data]
    if not rows:
        return

    if fields is None:
        fields = sorted({key for row in rows for key in row})

    output = io.StringIO()
    writer = csv.DictWriter(output, fieldnames=fields, delimiter=delimiter,
                            extrasaction='ignore', lineterminator='\n')
    writer.writeheader()
    writer.writerows(rows)
    yield output.getvalue().rstrip('\n')


def flatten_dict(d: Dict[str, Any], parent_key: str = '', sep: str = '.') -> Dict[str, Any]:
    """
    Flatten a nested dictionary.

    Example:
        {'a': {'b': 1, 'c': 2}} -> {'a.b': 1, 'a.c': 2}
    """
    items: list[tuple[str, Any]] = []
    for k, v in d.items():
        new_key = f"{parent_key}{sep}{k}" if parent_key else k

        if isinstance(v, dict):
            items.extend(flatten_dict(v, new_key, sep=sep).items())
        elif isinstance(v, list):
            items.append((new_key, ', '.join(str(item) for item in v)))
        else:
            items.append((new_key, v))

    return dict(items)


def get_format_from_env(default: str = 'jsonl') -> str:
    """Output format from REPOGET_FORMAT, falling back to ``default``."""
    format = os.environ.get('REPOGET_FORMAT', default).lower()
    if format not in FORMATS:
        return default
    return format
