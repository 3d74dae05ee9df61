"""Sets up fixtures general to the entire test suite of this package.

This file is read during the collection phase of pytest when running anything
inside this directory.
"""

import numpy as np
import pytest

from calomon.data import CaloCluster, CaloHit, TrueParticle
from calomon.io import Event

# Names of the collections used throughout the tests
PARTICLE_COLL = "GenParticles"
CLUSTER_COLL = "CaloClusters"
HIT_COLL = "ECalPositionedHits"

# Radius of the calorimeter barrel used to place clusters
RADIUS = 2000.0


def cluster_at(eta, phi, energy, radius=RADIUS):
    """Builds a cluster at a given (eta, phi) on a cylinder of fixed radius.

    Parameters
    ----------
    eta : float
        Pseudorapidity of the cluster
    phi : float
        Azimuthal angle of the cluster
    energy : float
        Energy of the cluster
    radius : float, optional
        Transverse distance of the cluster to the beam axis

    Returns
    -------
    CaloCluster
        Cluster object
    """
    position = [radius * np.cos(phi), radius * np.sin(phi), radius * np.sinh(eta)]
    return CaloCluster(position=position, energy=energy)


def particle_along(eta, phi, p=10.0):
    """Builds a particle with a momentum pointing at a given (eta, phi).

    Parameters
    ----------
    eta : float
        Pseudorapidity of the momentum
    phi : float
        Azimuthal angle of the momentum
    p : float, default 10.0
        Transverse momentum scale

    Returns
    -------
    TrueParticle
        Particle object
    """
    momentum = [p * np.cos(phi), p * np.sin(phi), p * np.sinh(eta)]
    return TrueParticle(pdg=11, vertex=[0.0, 0.0, 0.0], momentum=momentum)


def make_event(particles=None, clusters=None, hits=None, index=0):
    """Builds an in-memory event; `None` collections are left out.

    Parameters
    ----------
    particles : List[TrueParticle], optional
        Generated particles
    clusters : List[CaloCluster], optional
        Reconstructed clusters
    hits : List[CaloHit], optional
        Calorimeter hits
    index : int, default 0
        Index of the event

    Returns
    -------
    Event
        Event object
    """
    truth, reco = {}, {}
    if particles is not None:
        truth[PARTICLE_COLL] = particles
    if hits is not None:
        truth[HIT_COLL] = hits
    if clusters is not None:
        reco[CLUSTER_COLL] = clusters

    return Event.from_dict(truth, reco, index)


@pytest.fixture(name="monitor_cfg")
def fixture_monitor_cfg():
    """Basic configuration of a single-particle monitor (10 GeV)."""
    return {
        "cluster_coll_name": CLUSTER_COLL,
        "particle_coll_name": PARTICLE_COLL,
        "energy": 10.0,
        "eta_max": 1.68,
        "num_eta": 336,
        "num_phi": 628,
        "d_eta": 0.01,
        "d_phi": 0.01,
    }


@pytest.fixture(name="first_layer_hits")
def fixture_first_layer_hits():
    """Hits in cells 1 to 6, with a layer index equal to their cell ID."""
    return [CaloHit(cell_id=i, energy=0.1 * i) for i in range(1, 7)]
