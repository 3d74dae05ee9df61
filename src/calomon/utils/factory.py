"""Functions needed to build a monitoring object from a dictionary.

This allows to convert a YAML configuration block into an instantiated
monitor, layer decoder or correction model, with checks that the requested
class exists and that it accepts the arguments it is given.
"""

from copy import deepcopy

from .logger import logger


def module_dict(module, pattern=None):
    """Converts a module into a dictionary which maps names onto classes.

    Each public class defined in the module (or one of its submodules) is
    registered under its class name, under its `name` attribute, if it has
    one, and under each of its `aliases`.

    Parameters
    ----------
    module : module
        Module from which to fetch the classes
    pattern : str, optional
        If specified, only keep classes which contain this pattern

    Returns
    -------
    dict
        Dictionary which maps acceptable names to classes
    """
    classes = {}
    for cls_name in getattr(module, "__all__", dir(module)):
        # Skip private objects
        if cls_name.startswith("_"):
            continue

        # Only keep classes defined within the module of interest
        cls = getattr(module, cls_name)
        if not isinstance(cls, type):
            continue
        if not cls.__module__.startswith(module.__name__):
            continue
        if pattern is not None and pattern not in cls.__name__:
            continue

        classes[cls_name] = cls
        if getattr(cls, "name", None):
            classes[cls.name] = cls
        for alias in getattr(cls, "aliases", ()):
            classes[alias] = cls

    return classes


def instantiate(module_dict, cfg, alt_name=None, **kwargs):
    """Instantiates a class from a configuration dictionary.

    The configuration block is expected to look like:

    .. code-block:: yaml

        block:
          name: class_name
          kwarg_1: value_1
          kwarg_2: value_2

    A plain string is interpreted as a class name with no parameters.

    Parameters
    ----------
    module_dict : dict
        Dictionary which maps a name onto a class
    cfg : Union[str, dict]
        Configuration block
    alt_name : str, optional
        Key under which the class name can be specified instead of `name`
    **kwargs : dict, optional
        Additional parameters to pass to the class constructor

    Returns
    -------
    object
        Instantiated object
    """
    # A bare string is a class name with no parameters
    if isinstance(cfg, str):
        cfg = {"name": cfg}

    # Fetch the name of the class
    config = deepcopy(cfg)
    key = "name"
    if alt_name is not None:
        assert (alt_name in config) ^ (
            "name" in config
        ), f"Should specify one of `name` or `{alt_name}`."
        if alt_name in config:
            key = alt_name
    else:
        assert "name" in config, "Could not find the name of the class under `name`."

    class_name = config.pop(key)
    if class_name not in module_dict:
        raise ValueError(
            f"Could not find '{class_name}' in the dictionary which maps names "
            f"to classes. Available names: {list(module_dict.keys())}"
        )

    # Top-level keys are keyword arguments, they must not clash
    for k in config:
        assert k not in kwargs, (
            f"The keyword argument `{k}` is provided both in the "
            "configuration and by the caller. Ambiguous."
        )
    kwargs.update(config)

    cls = module_dict[class_name]
    try:
        return cls(**kwargs)

    except Exception as err:
        logger.error(
            "Failed to instantiate %s with these arguments:\n  - kwargs: %s",
            cls.__name__,
            kwargs,
        )

        raise err
