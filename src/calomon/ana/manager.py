"""Manages the operation of analysis scripts."""

from collections import OrderedDict
from copy import deepcopy

import numpy as np

from calomon.utils.logger import logger

from .factories import ana_script_factory


class AnaManager:
    """Manager class to initialize and execute analysis scripts.

    It loads all the analysis scripts, feeds each event to every one of
    them and finalizes all of them at the end of the run. A typical use is
    to monitor several cluster collections of the same sample at once.
    """

    def __init__(self, cfg, verbose=False):
        """Initialize the analysis manager.

        Parameters
        ----------
        cfg : dict
            Analysis script configurations, one block per script
        verbose : bool, default False
            If `True`, log the content of each event in every script which
            does not specify its own `verbose` flag
        """
        # Loop over the analyzer modules and get their priorities
        modules = deepcopy(cfg)
        keys = np.array(list(modules.keys()))
        priorities = -np.ones(len(keys), dtype=np.int32)
        for i, k in enumerate(keys):
            if "priority" in modules[k]:
                priorities[i] = modules[k].pop("priority")

        # Add the modules to a processor list in decreasing order of priority
        self.modules = OrderedDict()
        for k in keys[np.argsort(-priorities, kind="stable")]:
            modules[k].setdefault("verbose", verbose)
            self.modules[str(k)] = ana_script_factory(str(k), modules[k])
            logger.info("Initialized analysis script `%s`", k)

    def __len__(self):
        """Number of analysis scripts."""
        return len(self.modules)

    def __getitem__(self, key):
        """Fetches an analysis script by the name of its block.

        Parameters
        ----------
        key : str
            Name of the configuration block of the analysis script

        Returns
        -------
        AnaBase
            Analysis script
        """
        return self.modules[key]

    def __call__(self, event):
        """Pass one event through the analysis scripts.

        Parameters
        ----------
        event : Event
            Event to process

        Returns
        -------
        dict
            Summary returned by each analysis script, by block name
        """
        return {key: module(event) for key, module in self.modules.items()}

    def merge(self, other):
        """Adds the content of another manager with the same scripts.

        Parameters
        ----------
        other : AnaManager
            Analysis manager built from the same configuration
        """
        assert set(other.modules) == set(self.modules), (
            "Cannot merge analysis managers with different scripts."
        )
        for key, module in self.modules.items():
            module.merge(other.modules[key])

    def finish(self, num_events=None):
        """Finalize every analysis script.

        Parameters
        ----------
        num_events : int, optional
            Number of events in the sample. If not specified, each script
            uses the number of events it was given.
        """
        for module in self.modules.values():
            module.finish(num_events)
