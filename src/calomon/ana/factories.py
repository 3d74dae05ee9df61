"""Construct an analysis script module class from its name."""

from calomon.utils.factory import instantiate, module_dict

from . import metric

# Build a dictionary of available analysis scripts
ANA_DICT = {}
for module in [metric]:
    ANA_DICT.update(**module_dict(module))


def ana_script_factory(name, cfg):
    """Instantiates an analysis script from a configuration dictionary.

    Parameters
    ----------
    name : str
        Name of the analysis script block. It is used as the class name if
        the block does not provide one under `name`.
    cfg : dict
        Analysis script configuration

    Returns
    -------
    object
         Initialized analysis script
    """
    cfg = dict(cfg)
    cfg.setdefault("name", name)

    return instantiate(ANA_DICT, cfg)
