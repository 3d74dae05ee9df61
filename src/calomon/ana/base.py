"""Base class of all monitoring analysis scripts."""

from abc import ABC, abstractmethod
from collections import Counter

from calomon.utils.errors import RunStateError
from calomon.utils.logger import logger


class AnaBase(ABC):
    """Parent class of all monitoring analysis scripts.

    This base class performs the following functions:
    - Ensures that the necessary methods exist
    - Counts the events it is given and the events it has to skip
    - Enforces the run lifecycle: events are processed until the run is
      finalized, which happens exactly once

    Attributes
    ----------
    name : str
        Name of the analysis script (to call it from a configuration file)
    aliases : Tuple[str]
        Alternative allowed names of the analysis script
    accumulators : AccumulatorSet
        Histograms filled by the analysis script
    num_events : int
        Number of events passed to the analysis script
    skip_counts : Counter
        Number of skipped events, per reason
    finished : bool
        Whether the run has been finalized
    verbose : bool
        Whether to log the content of each event
    """

    # Name of the analysis script (as specified in the configuration)
    name = None

    # Alternative allowed names of the analysis script
    aliases = ()

    def __init__(self, verbose=False):
        """Initialize default analysis script properties.

        Parameters
        ----------
        verbose : bool, default False
            If `True`, log the content of each event and
            lower the level of the logger to INFO
        """
        self.verbose = verbose
        if verbose:
            logger.setLevel("INFO")
        self.accumulators = None
        self.num_events = 0
        self.skip_counts = Counter()
        self.finished = False

    def __call__(self, event):
        """Runs the analysis script on one event.

        Parameters
        ----------
        event : Event
            Event to process

        Returns
        -------
        dict
            Summary of the processed event, `None` if it was skipped
        """
        if self.finished:
            raise RunStateError(
                f"`{self.name}` was already finalized, it cannot process "
                "more events."
            )

        self.num_events += 1

        return self.process(event)

    def fetch(self, store, coll_name, reason):
        """Fetches a collection from an event store.

        A missing collection is not an error. It is logged and recorded as
        the reason why the event is skipped.

        Parameters
        ----------
        store : EventStore
            Store to fetch the collection from
        coll_name : str
            Name of the collection
        reason : str
            Skip reason to record if the collection is missing

        Returns
        -------
        list
            Collection, `None` if it is missing
        """
        collection, found = store.get(coll_name)
        if not found:
            logger.warning("No `%s` collection in the event.", coll_name)
            self.skip_counts[reason] += 1
            return None

        return collection

    def merge(self, other):
        """Adds the content of another instance of the same analysis script.

        This allows to split a sample between several workers, each with
        its own instance, and to combine them before finalizing the run.

        Parameters
        ----------
        other : AnaBase
            Analysis script of the same type, not finalized
        """
        assert type(other) is type(self), (
            f"Cannot merge a `{type(other).__name__}` into a "
            f"`{type(self).__name__}`."
        )
        if self.finished or other.finished:
            raise RunStateError("Cannot merge analysis scripts once finalized.")

        self.accumulators.merge(other.accumulators)
        self.num_events += other.num_events
        self.skip_counts.update(other.skip_counts)

    def finish(self, num_events=None):
        """Finalizes the run.

        Parameters
        ----------
        num_events : int, optional
            Number of events in the sample. If not specified, the number of
            events passed to the analysis script is used.
        """
        if self.finished:
            raise RunStateError(f"`{self.name}` was already finalized.")

        if num_events is None:
            num_events = self.num_events

        self.finalize(num_events)
        self.finished = True

        if sum(self.skip_counts.values()):
            logger.info(
                "`%s` skipped %d event(s): %s",
                self.name,
                sum(self.skip_counts.values()),
                dict(self.skip_counts),
            )

    @abstractmethod
    def process(self, event):
        """Place-holder method to be defined in each analysis script.

        Parameters
        ----------
        event : Event
            Event to process
        """
        raise NotImplementedError("Must define the `process` function")

    @abstractmethod
    def finalize(self, num_events):
        """Place-holder method to be defined in each analysis script.

        Parameters
        ----------
        num_events : int
            Number of events in the sample
        """
        raise NotImplementedError("Must define the `finalize` function")
