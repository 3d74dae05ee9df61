"""Data structures read from simulated single-particle events.

- `particle`: generator-level particle (`TrueParticle`)
- `cluster`: reconstructed calorimeter cluster (`CaloCluster`)
- `hit`: energy deposit in a calorimeter cell (`CaloHit`)
"""

from .cluster import *
from .hit import *
from .particle import *
