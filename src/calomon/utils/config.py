"""Module in charge of loading monitoring configuration files.

Configuration files are YAML files. On top of plain YAML, they support:
- `include: base.yaml` (or a list of files) at the top level, which loads
  the listed files first and merges the current file on top of them;
- `key: !include block.yaml` to load a single block from another file;
- dot-notation overrides, e.g. `ana.ecal_monitor.energy: 100`, which edit a
  single nested parameter without replicating the whole block.
"""

import os
import re
from copy import deepcopy

import yaml

from .errors import CalomonError

__all__ = ["load_config", "ConfigError"]

# Keys of the form `block.sub_block.parameter`
DOTTED_KEY = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_]*(?:\.[a-zA-Z_][a-zA-Z0-9_]*)+$")


class ConfigError(CalomonError):
    """Raised when a configuration file cannot be loaded or merged."""


class ConfigLoader(yaml.SafeLoader):
    """YAML loader which resolves `!include` tags relative to the file."""

    def __init__(self, stream):
        """Initialize the loader.

        Parameters
        ----------
        stream : _io.TextIOWrapper
            Output of python's `open` function on a yaml file
        """
        self._root = os.path.dirname(getattr(stream, "name", "."))
        super().__init__(stream)

    def include(self, node):
        """Load a YAML file requested with an `!include` tag.

        Parameters
        ----------
        node : yaml.ScalarNode
            Node which holds the relative path to the file
        """
        path = os.path.join(self._root, self.construct_scalar(node))
        if not os.path.isfile(path):
            raise ConfigError(f"Included file not found: {path}")

        with open(path, "r", encoding="utf-8") as f:
            return yaml.load(f, Loader=ConfigLoader)


ConfigLoader.add_constructor("!include", ConfigLoader.include)


def deep_merge(base, update):
    """Recursively merge `update` into a copy of `base`.

    Parameters
    ----------
    base : dict
        Base dictionary
    update : dict
        Dictionary with values which take precedence

    Returns
    -------
    dict
        Merged dictionary
    """
    result = deepcopy(base)
    for key, value in update.items():
        if isinstance(result.get(key), dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def set_nested_value(config, key_path, value):
    """Set a nested value in a dictionary using dot notation.

    Parameters
    ----------
    config : dict
        Configuration dictionary to modify in place
    key_path : str
        Dot-separated path to the parameter
    value : object
        Value to set
    """
    keys = key_path.split(".")
    current = config
    for key in keys[:-1]:
        current = current.setdefault(key, {})
        if not isinstance(current, dict):
            raise ConfigError(f"Cannot set `{key_path}`: `{key}` is not a block.")

    current[keys[-1]] = value


def load_config(cfg_path):
    """Load a configuration file to a dictionary.

    Parameters
    ----------
    cfg_path : str
        Path to the configuration file

    Returns
    -------
    dict
        Loaded and merged configuration dictionary
    """
    if not os.path.isfile(cfg_path):
        raise ConfigError(f"Configuration file not found: {cfg_path}")

    with open(cfg_path, "r", encoding="utf-8") as f:
        raw = yaml.load(f, Loader=ConfigLoader)

    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ConfigError(
            f"The top level of `{cfg_path}` must be a dictionary, got "
            f"{type(raw).__name__}."
        )

    # Split the include directive and the overrides from the content
    includes = raw.pop("include", [])
    if isinstance(includes, str):
        includes = [includes]
    overrides = {k: raw.pop(k) for k in list(raw) if DOTTED_KEY.match(k)}

    # Included files are loaded first, in order, then the file itself
    root = os.path.dirname(os.path.abspath(cfg_path))
    config = {}
    for include in includes:
        config = deep_merge(config, load_config(os.path.join(root, include)))
    config = deep_merge(config, raw)

    # Apply overrides last
    for key_path, value in overrides.items():
        set_nested_value(config, key_path, value)

    return config
