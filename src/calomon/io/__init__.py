"""Event access layer.

Monitors read events through the `EventStore` interface. Reading simulation
or reconstruction files is left to the stores which implement it; the
`DictEventStore` keeps collections in memory.
"""

from .event import *
from .store import *
