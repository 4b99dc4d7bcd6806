#!/usr/bin/env python3

import os
import json
import tomllib
from pathlib import Path
from typing import Any, Dict, List, Optional

import logging
import sys

import yaml

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(levelname)s: %(message)s",
    handlers=[
        logging.StreamHandler(sys.stderr) # Default to stderr
    ]
)
logger = logging.getLogger("repoget")

ENV_CONFIG = "REPOGET_CONFIG"
ENV_ROOT = "REPOGET_ROOT"
ENV_PREFIX = "REPOGET_"

DEFAULT_ROOT = "~/repoget"


def get_config_path():
    """Get the path to the configuration file.

    Checks in order:
    1. REPOGET_CONFIG environment variable
    2. ~/.repoget/ directory
    """
    # Check for environment variable override
    if ENV_CONFIG in os.environ:
        path = Path(os.environ[ENV_CONFIG])
        if path.exists():
            return path

    repoget_dir = Path.home() / '.repoget'
    for filename in ['config.json', 'config.toml', 'config.yaml', 'config.yml']:
        path = repoget_dir / filename
        if path.exists() and path.stat().st_size > 0:
            return path

    # If no file exists, return default path
    return repoget_dir / 'config.json'


def load_config():
    """Load configuration from file."""
    config_path = get_config_path()

    # Start with default config
    config = get_default_config()

    # Load from file if it exists
    if config_path.exists():
        try:
            if config_path.suffix.lower() in ['.toml']:
                with open(config_path, 'rb') as f:
                    file_config = tomllib.load(f)
            elif config_path.suffix.lower() in ['.yaml', '.yml']:
                with open(config_path, 'r') as f:
                    file_config = yaml.safe_load(f)
            else:
                # Default to JSON format
                with open(config_path, 'r') as f:
                    file_config = json.load(f)

            # Merge file config with defaults
            config = merge_configs(config, file_config or {})
        except (OSError, ValueError, yaml.YAMLError, tomllib.TOMLDecodeError) as e:
            logger.error(f"Error loading config from {config_path}: {e}")

    # Apply environment variable overrides
    config = apply_env_overrides(config)

    return config


def get_default_config():
    """Get default configuration."""
    return {
        "general": {
            "roots": [DEFAULT_ROOT],       # Ordered list; the first one is primary
            "default_host": "github.com",  # Host used for short references
            "user": "",                    # Owner filled into bare project names
            "complete_user": True,         # False turns "foo" into "foo/foo"
            "parallel_width": 6,           # Concurrent clones for --parallel
        },
        "hosts": {
            "github": [],                  # Enterprise hosts handled like github.com
        },
        # Per-URL settings, longest prefix wins:
        #   {"https://ghe.example.com/": {"vcs": "git", "root": "~/work"}}
        "url_rules": {},
        "logging": {
            "level": "INFO",
        },
    }


def merge_configs(base_config, override_config):
    """
    Recursively merge two configuration dictionaries.

    Args:
        base_config (dict): Base configuration
        override_config (dict): Configuration to merge/override with

    Returns:
        dict: Merged configuration
    """
    merged = base_config.copy()

    for key, value in override_config.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            # Recursively merge nested dictionaries
            merged[key] = merge_configs(merged[key], value)
        else:
            # Override or add new key
            merged[key] = value

    return merged


def apply_env_overrides(config):
    """
    Apply environment variable overrides to configuration.
    Environment variables follow the pattern: REPOGET_SECTION_KEY
    For example: REPOGET_GENERAL_PARALLEL_WIDTH=10
    """
    for env_key, value in os.environ.items():
        if not env_key.startswith(ENV_PREFIX):
            continue

        key_parts = env_key[len(ENV_PREFIX):].lower().split('_')

        # Convert value
        if value.lower() in ('true', 'yes', 'on'):
            typed_value = True
        elif value.lower() in ('false', 'no', 'off'):
            typed_value = False
        elif value.isdigit():
            typed_value = int(value)
        else:
            typed_value = value

        current_level = config
        i = 0
        while i < len(key_parts):
            # Find the longest key in current_level that is a prefix of the remaining key_parts
            best_match_len = 0
            matched_key = None

            for config_key in current_level.keys():
                config_key_parts_from_key = config_key.split('_')
                if key_parts[i : i + len(config_key_parts_from_key)] == config_key_parts_from_key:
                    if len(config_key_parts_from_key) > best_match_len:
                        best_match_len = len(config_key_parts_from_key)
                        matched_key = config_key

            if matched_key:
                # If we are at the end of the env var, we have found the key to set
                if i + best_match_len == len(key_parts):
                    current_level[matched_key] = typed_value
                    break

                # Otherwise, we descend into the dictionary
                if isinstance(current_level[matched_key], dict):
                    current_level = current_level[matched_key]
                    i += best_match_len
                else:
                    # Path conflict, e.g., env var is longer but we found a non-dict value
                    break
            else:
                # No match found
                break

    return config


def _as_list(value) -> List[str]:
    """Accept both a list and an os.pathsep separated string."""
    if not value:
        return []
    if isinstance(value, str):
        return [v for v in value.split(os.pathsep) if v]
    return [str(v) for v in value if v]


def normalize_root(root: str) -> str:
    path = os.path.abspath(os.path.normpath(os.path.expanduser(root)))
    if os.path.exists(path):
        path = os.path.realpath(path)
    return path


def local_repository_roots(config: Dict[str, Any], all_roots: bool = True) -> List[str]:
    """
    Ordered, deduplicated list of local repository roots.

    - If REPOGET_ROOT is set it is the only source of roots.
    - Otherwise ``general.roots`` from the config file is used.
    - Otherwise fall back to ``~/repoget``.

    With ``all_roots`` the roots declared by ``url_rules`` are appended.
    """
    env_root = os.environ.get(ENV_ROOT, "")
    if env_root:
        roots = _as_list(env_root)
    else:
        roots = _as_list(config.get("general", {}).get("roots"))

    if not roots:
        roots = [DEFAULT_ROOT]

    if all_roots and not env_root:
        for rule in (config.get("url_rules") or {}).values():
            if isinstance(rule, dict) and rule.get("root"):
                roots.append(rule["root"])

    result: List[str] = []
    for root in roots:
        path = normalize_root(root)
        if path not in result:
            result.append(path)
    return result


def match_url_rule(config: Dict[str, Any], url: str, key: str) -> Optional[str]:
    """
    Look up ``key`` in the URL rule with the longest prefix matching ``url``.

    Returns None when no rule matches or the best rule lacks the key.
    """
    best_prefix = None
    for prefix, rule in (config.get("url_rules") or {}).items():
        if not isinstance(rule, dict) or key not in rule:
            continue
        if url.startswith(prefix) or url.startswith(prefix.rstrip('/')):
            if best_prefix is None or len(prefix) > len(best_prefix):
                best_prefix = prefix
    if best_prefix is None:
        return None
    value = config["url_rules"][best_prefix][key]
    return str(value) if value is not None else None


def github_hosts(config: Dict[str, Any]) -> List[str]:
    """Hosts whose repositories follow the github.com layout."""
    return ["github.com"] + _as_list((config.get("hosts") or {}).get("github"))
