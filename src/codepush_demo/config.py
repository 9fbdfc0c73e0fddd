"""
Tool config (from config.toml next to this module)
"""
import os
import tomllib
from types import SimpleNamespace

script_dir = os.path.dirname(os.path.abspath(__file__))
config_path = os.path.join(script_dir, "config.toml")


def load_config(path: str = config_path):
    """Load config.toml into a namespace; nested tables become namespaces too."""
    with open(path, "rb") as f:
        data = tomllib.load(f)
    return SimpleNamespace(
        tool_name=data['tool_name'],
        default_app_name=data['default_app_name'],
        fixture_dir=data['fixture_dir'],
        placeholder_name=data['placeholder_name'],
        link_timeout=float(data.get('link_timeout', 300)),
        packages=SimpleNamespace(**data['packages']),
        prompts=SimpleNamespace(**data['prompts']),
    )


config = load_config()
TOOL_NAME = config.tool_name
