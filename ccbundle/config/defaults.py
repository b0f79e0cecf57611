# CCBundle Default Configuration
# Full default configuration as Python dict and YAML generator

import copy
from typing import Any

import yaml

DEFAULT_CONFIG: dict[str, Any] = {
    "remote": {
        "repository": "Melvynx/aiblueprint-cli",
        "branch": "main",
        "base_path": "claude-code-config",
        "api_url": "https://api.github.com",
        "raw_url": "https://raw.githubusercontent.com",
        "timeout": 30.0,
    },
    "target": {
        "path": "~/.claude",
        "tool_dir": ".claude",
        "categories": ["commands", "agents", "skills", "scripts"],
        "ignore": [".DS_Store", ".git", "Thumbs.db", "__pycache__", "node_modules"],
    },
    "backup": {
        "enabled": True,
        "root": "~/.config/ccbundle/backup",
    },
    "cache": {
        "dir": "~/.cache/ccbundle",
        "git_timeout": 120.0,
        "install_timeout": 300.0,
    },
    "peers": {
        "codex": None,
        "opencode": None,
        "factoryai": None,
    },
    "output": {
        "verbose": False,
        "colored": True,
    },
}


def default_config_dict() -> dict[str, Any]:
    """Return a deep copy of the default configuration."""
    return copy.deepcopy(DEFAULT_CONFIG)


def generate_default_config() -> str:
    """
    Generate the default configuration file content.

    Returns:
        YAML document with a short explanatory header.
    """
    header = (
        "# ccbundle configuration\n"
        "#\n"
        "# remote.token may be omitted; CCBUNDLE_GITHUB_TOKEN or GITHUB_TOKEN\n"
        "# are read from the environment for private repositories.\n"
        "\n"
    )
    body = yaml.dump(default_config_dict(), default_flow_style=False, sort_keys=False, allow_unicode=True)
    return header + body
