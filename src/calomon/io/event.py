"""Module with the container which bundles the stores of one event."""

from dataclasses import dataclass, field

from .store import DictEventStore, EventStore

__all__ = ["Event"]


@dataclass
class Event:
    """One simulated event, split between its truth and reconstructed stores.

    Attributes
    ----------
    truth : EventStore
        Store which holds the simulation output (generated particles, hits)
    reco : EventStore
        Store which holds the reconstruction output (clusters)
    index : int
        Index of the event in the sample
    """

    truth: EventStore = field(default_factory=DictEventStore)
    reco: EventStore = field(default_factory=DictEventStore)
    index: int = -1

    @classmethod
    def from_dict(cls, truth=None, reco=None, index=-1):
        """Builds an event from dictionaries of collections.

        Parameters
        ----------
        truth : Dict[str, list], optional
            Truth collections, by name
        reco : Dict[str, list], optional
            Reconstructed collections, by name
        index : int, default -1
            Index of the event in the sample

        Returns
        -------
        Event
            Event object backed by in-memory stores
        """
        return cls(DictEventStore(truth), DictEventStore(reco), index)
