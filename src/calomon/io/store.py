"""Contains the event store interface.

An event store holds the named collections of one event (generated
particles, reconstructed clusters, calorimeter hits, ...). Monitors only
ever access a store through its `get` method, which mirrors the interface
of the event stores the simulation and reconstruction files are read with.
"""

from abc import ABC, abstractmethod

__all__ = ["EventStore", "DictEventStore"]


class EventStore(ABC):
    """Parent class of all event stores.

    Inheriting classes must define the `get` method. Retrieving a collection
    which does not exist is not an error: the store reports it as not found
    and leaves it up to the caller to decide what to do.
    """

    @abstractmethod
    def get(self, name):
        """Fetches a collection from the store.

        Parameters
        ----------
        name : str
            Name of the collection

        Returns
        -------
        list
            Collection of objects, `None` if it is not found
        bool
            `True` if the collection was found in the store
        """
        raise NotImplementedError("Must define the `get` function")

    def __contains__(self, name):
        """Checks whether a collection exists in the store.

        Parameters
        ----------
        name : str
            Name of the collection

        Returns
        -------
        bool
            `True` if the collection was found in the store
        """
        return self.get(name)[1]


class DictEventStore(EventStore):
    """In-memory event store backed by a dictionary of collections."""

    def __init__(self, collections=None):
        """Initialize the store.

        Parameters
        ----------
        collections : Dict[str, list], optional
            Initial set of (name, collection) pairs
        """
        self._collections = {}
        for name, collection in (collections or {}).items():
            self.put(name, collection)

    def __len__(self):
        """Returns the number of collections in the store."""
        return len(self._collections)

    def keys(self):
        """List of collection names available in the store.

        Returns
        -------
        List[str]
            Collection names
        """
        return list(self._collections.keys())

    def put(self, name, collection):
        """Adds (or replaces) a collection in the store.

        Parameters
        ----------
        name : str
            Name of the collection
        collection : Iterable
            Objects in the collection
        """
        assert isinstance(name, str) and len(name) > 0, (
            "Collection name must be a non-empty string."
        )
        self._collections[name] = list(collection)

    def get(self, name):
        """Fetches a collection from the store.

        Parameters
        ----------
        name : str
            Name of the collection

        Returns
        -------
        list
            Collection of objects, `None` if it is not found
        bool
            `True` if the collection was found in the store
        """
        if name not in self._collections:
            return None, False

        return self._collections[name], True
