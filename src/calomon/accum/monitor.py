"""Definition of the histograms filled by the single-particle monitor.

The binning of every histogram follows from a handful of run parameters:
the beam energy, the pseudorapidity acceptance, the number of eta/phi bins
and the eta/phi cell sizes of the calorimeter.
"""

import numpy as np

from .accumulator import Accumulator, AccumulatorSet

__all__ = [
    "build_monitor_accumulators",
    "PER_EVENT_NAMES",
    "PER_CLUSTER_NAMES",
    "DUPLICATE_NAMES",
]

# Histograms filled once per event with a cluster collection
PER_EVENT_NAMES = ("energyTotal", "clusters", "clusters_phi", "clusters_eta")

# Histograms filled once per reconstructed (best) cluster
PER_CLUSTER_NAMES = (
    "energy",
    "energyCorrected",
    "energy_phi",
    "eta",
    "phi",
    "phi_phi",
    "eta_eta",
)

# Histograms filled once per duplicate cluster
DUPLICATE_NAMES = (
    "energy_duplicates",
    "energy_diff",
    "eta_duplicates",
    "eta_diff",
    "phi_duplicates",
    "phi_diff",
    "R_diff",
)

# Number of bins of the energy and resolution axes
ENERGY_BINS = 99
DIFF_BINS = 101
PHI_RES_BINS = 909
MULTIPLICITY_BINS = 7


def build_monitor_accumulators(energy, eta_max, num_eta, num_phi, d_eta, d_phi):
    """Builds the set of histograms filled by the single-particle monitor.

    Parameters
    ----------
    energy : float
        Energy of the generated particles in GeV
    eta_max : float
        Maximum pseudorapidity of the calorimeter acceptance
    num_eta : int
        Number of bins along eta
    num_phi : int
        Number of bins along phi
    d_eta : float
        Size of a calorimeter cell in eta
    d_phi : float
        Size of a calorimeter cell in phi

    Returns
    -------
    AccumulatorSet
        Set of 18 empty accumulators
    """
    tag = f"(e^{{-}}, {int(energy)} GeV)"
    e_axis = (ENERGY_BINS, 0.0, 1.5 * energy, "energy (GeV)")
    phi_axis = (num_phi, -np.pi, np.pi, "#varphi")
    eta_axis = (num_eta, -eta_max, eta_max, "#eta")
    deta_axis = (DIFF_BINS, -10 * d_eta, 10 * d_eta, "#Delta#eta")
    dphi_axis = (PHI_RES_BINS, -100 * d_phi, 100 * d_phi, "#Delta#varphi")
    mult_axis = (MULTIPLICITY_BINS, -0.5, 7.5, "number of clusters per event")

    return AccumulatorSet(
        [
            Accumulator("energyTotal", [e_axis], f"Energy of all clusters {tag}"),
            Accumulator("energy", [e_axis], f"Energy of clusters {tag}"),
            Accumulator(
                "energyCorrected",
                [e_axis],
                f"Energy of clusters corrected for upstream energy {tag}",
            ),
            Accumulator(
                "energy_phi",
                [phi_axis, (ENERGY_BINS, 0.5 * energy, 1.5 * energy, "energy (GeV)")],
                f"Energy of clusters {tag}",
            ),
            Accumulator("eta", [deta_axis], f"#Delta #eta {tag}"),
            Accumulator("phi", [dphi_axis], f"#Delta #varphi {tag}"),
            Accumulator("eta_eta", [eta_axis, deta_axis], f"#Delta #eta {tag}"),
            Accumulator("phi_phi", [phi_axis, dphi_axis], f"#Delta #varphi {tag}"),
            Accumulator(
                "clusters",
                [(MULTIPLICITY_BINS, -0.5, 6.5, "number of clusters per event")],
                f"Number of clusters {tag}",
            ),
            Accumulator(
                "clusters_phi", [phi_axis, mult_axis], f"Number of clusters {tag}"
            ),
            Accumulator(
                "clusters_eta", [eta_axis, mult_axis], f"Number of clusters {tag}"
            ),
            Accumulator(
                "energy_duplicates",
                [(ENERGY_BINS, 0.0, 1.5 * energy, "E (GeV)")],
                f"Energy of cluster duplicates {tag}",
            ),
            Accumulator(
                "energy_diff",
                [(DIFF_BINS, 0.0, 1.0, "#Delta E / E")],
                f"#DeltaE/E for events with more than 1 cluster {tag}",
            ),
            Accumulator(
                "eta_duplicates", [eta_axis], f"#eta of cluster duplicates {tag}"
            ),
            Accumulator(
                "eta_diff",
                [deta_axis],
                f"#Delta#eta for events with more than 1 cluster {tag}",
            ),
            Accumulator(
                "phi_duplicates", [phi_axis], f"#varphi of cluster duplicates {tag}"
            ),
            Accumulator(
                "phi_diff",
                [(DIFF_BINS, -2.1 * np.pi, 2.1 * np.pi, "#Delta#varphi")],
                f"#Delta#varphi for events with more than 1 cluster {tag}",
            ),
            Accumulator(
                "R_diff",
                [(DIFF_BINS, -200 * d_phi, 200 * d_phi, "#Delta R")],
                f"#Delta R for events with more than 1 cluster {tag}",
            ),
        ]
    )
