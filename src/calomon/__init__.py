"""Top-level module of the calorimeter reconstruction monitoring tools."""

from .version import __version__

# Import the main entry points
from .ana import AnaManager
from .ana.metric import SingleParticleRecoAna

# Import commonly used data structures
from .data import CaloCluster, CaloHit, TrueParticle
from .io import DictEventStore, Event
