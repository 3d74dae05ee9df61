"""Analysis script used to evaluate single-particle calorimeter reconstruction.

Each event is expected to contain a single generated particle. The most
energetic reconstructed cluster is taken as the reconstructed particle and
compared to the true particle direction and energy. Every other, less
energetic, cluster is considered a duplicate (a split or fake cluster) and
is compared to the reconstructed particle.
"""

import numpy as np

from calomon.accum import (
    PER_CLUSTER_NAMES,
    PER_EVENT_NAMES,
    build_monitor_accumulators,
)
from calomon.ana.base import AnaBase
from calomon.calib import UpstreamCorrection
from calomon.geo import ConstantLayerDecoder, layer_decoder_factory
from calomon.utils.logger import logger

__all__ = ["SingleParticleRecoAna"]


class SingleParticleRecoAna(AnaBase):
    """Fills resolution, multiplicity and duplicate histograms for
    single-particle events.

    The per-event histograms are normalized by the number of events and
    the reconstructed-particle histograms by the number of reconstructed
    particles once the run is finalized.
    """

    # Name of the analysis script (as specified in the configuration)
    name = "single_particle_reco"

    # Alternative allowed names of the analysis script
    aliases = ("single_particle",)

    def __init__(
        self,
        cluster_coll_name,
        particle_coll_name,
        energy,
        eta_max,
        num_eta,
        num_phi,
        d_eta,
        d_phi,
        upstream_params=None,
        hit_coll_name="ECalPositionedHits",
        first_layer_count=4,
        first_layer_offset=1,
        layer_of=None,
        verbose=False,
    ):
        """Initialize the analysis script.

        Parameters
        ----------
        cluster_coll_name : str
            Name of the reconstructed cluster collection
        particle_coll_name : str
            Name of the generated particle collection
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
        upstream_params : List[float], optional
            (p0p0, p0p1, p1p0, p1p1) parameters of the upstream energy
            correction. If not specified, no correction is applied.
        hit_coll_name : str, default 'ECalPositionedHits'
            Name of the calorimeter hit collection, used to compute the
            energy deposited in the first layer
        first_layer_count : int, default 4
            Number of readout layers which make up the first layer
        first_layer_offset : int, default 1
            Index of the first readout layer
        layer_of : Union[callable, str, dict], optional
            Maps a cell identifier onto a layer index, or configuration of
            such a decoder. Defaults to a placeholder decoder which puts
            every cell outside of the first layer.
        verbose : bool, default False
            If `True`, log the content of each event
        """
        # Initialize the parent class
        super().__init__(verbose)

        # Check parameters
        if energy <= 0:
            raise ValueError(f"The particle energy must be positive, got {energy}.")
        if eta_max <= 0:
            raise ValueError(f"`eta_max` must be positive, got {eta_max}.")
        if num_eta < 1 or num_phi < 1:
            raise ValueError(
                f"Must have at least one eta and phi bin, got {num_eta} and {num_phi}."
            )
        if d_eta <= 0 or d_phi <= 0:
            raise ValueError(
                f"Cell sizes must be positive, got d_eta={d_eta} and d_phi={d_phi}."
            )

        # Store the basic parameters
        self.cluster_coll_name = cluster_coll_name
        self.particle_coll_name = particle_coll_name
        self.energy = energy
        self.hit_coll_name = hit_coll_name
        self.max_layer = first_layer_count + first_layer_offset

        # Initialize the upstream correction, if requested
        self.correction, self.layer_of = None, None
        if upstream_params is not None:
            self.correction = UpstreamCorrection.from_params(upstream_params)
            if layer_of is None:
                layer_of = ConstantLayerDecoder()
            self.layer_of = layer_decoder_factory(layer_of)

        # Initialize the histograms
        self.accumulators = build_monitor_accumulators(
            energy, eta_max, num_eta, num_phi, d_eta, d_phi
        )

    @property
    def correct_upstream(self):
        """Whether the upstream energy correction is applied."""
        return self.correction is not None

    def first_layer_energy(self, hits):
        """Sums the energy deposited in the first calorimeter layer.

        Parameters
        ----------
        hits : List[CaloHit]
            Calorimeter hits in the event

        Returns
        -------
        float
            Energy deposited in the first layer in GeV
        """
        return sum(
            hit.energy for hit in hits if self.layer_of(hit.cell_id) < self.max_layer
        )

    def process(self, event):
        """Fill the histograms with the content of one event.

        Parameters
        ----------
        event : Event
            Event with generated particles in its truth store and
            reconstructed clusters in its reco store

        Returns
        -------
        dict
            Number of clusters and energy of the reconstructed particle,
            `None` if the event was skipped
        """
        # Get the generated particle, assuming single particle events
        particles = self.fetch(event.truth, self.particle_coll_name, "no_particles")
        if particles is None:
            return None
        if len(particles) == 0:
            logger.warning("No particle in the `%s` collection.", self.particle_coll_name)
            self.skip_counts["no_particles"] += 1
            return None
        if len(particles) > 1:
            logger.warning(
                "This is not a single particle event! Number of particles: %d",
                len(particles),
            )

        # If there are several particles, the last one is used
        for particle in particles:
            if self.verbose:
                logger.info("%s", particle)
        true_eta, true_phi = particle.eta, particle.phi

        # Get the energy deposited in the first layer, if needed
        first_layer_energy = 0.0
        if self.correct_upstream:
            hits = self.fetch(event.truth, self.hit_coll_name, "no_hits")
            if hits is None:
                return None
            if self.verbose:
                logger.info("Number of cells: %d", len(hits))
            first_layer_energy = self.first_layer_energy(hits)

        # Get the reconstructed clusters
        clusters = self.fetch(event.reco, self.cluster_coll_name, "no_clusters")
        if clusters is None:
            return None
        if self.verbose:
            logger.info("Number of clusters: %d", len(clusters))

        # Find the cluster with the highest energy (first one wins ties)
        sum_energy = 0.0
        best_id, coords = -1, []
        for i, cluster in enumerate(clusters):
            if self.verbose:
                logger.info("%s", cluster)
            coords.append((cluster.eta, cluster.phi))
            sum_energy += cluster.energy
            if best_id < 0 or clusters[best_id].energy < cluster.energy:
                best_id = i

        best_energy, best_eta, best_phi = 0.0, 0.0, 0.0
        if best_id > -1:
            best_energy = clusters[best_id].energy
            best_eta, best_phi = coords[best_id]

        # Fill histograms for all clusters in the event
        acc = self.accumulators
        num_clusters = len(clusters)
        acc.fill("energyTotal", sum_energy)
        acc.fill("clusters", num_clusters)
        acc.fill("clusters_phi", best_phi, num_clusters)
        acc.fill("clusters_eta", best_eta, num_clusters)

        # Distinguish between the reconstructed particle and duplicates
        for cluster, (eta, phi) in zip(clusters, coords):
            if cluster.energy < best_energy:
                acc.fill("energy_duplicates", cluster.energy)
                acc.fill("energy_diff", (best_energy - cluster.energy) / self.energy)
                acc.fill("eta_duplicates", eta)
                acc.fill("eta_diff", best_eta - eta)
                acc.fill("phi_duplicates", phi)
                acc.fill("phi_diff", best_phi - phi)
                acc.fill(
                    "R_diff",
                    np.sqrt(best_phi**2 + best_eta**2) - np.sqrt(phi**2 + eta**2),
                )

            else:
                d_eta, d_phi = best_eta - true_eta, best_phi - true_phi
                acc.fill("eta", d_eta, weight=best_energy)
                acc.fill("phi", d_phi, weight=best_energy)
                acc.fill("eta_eta", true_eta, d_eta, weight=best_energy)
                acc.fill("phi_phi", true_phi, d_phi, weight=best_energy)
                acc.fill("energy", best_energy)
                acc.fill("energy_phi", true_phi, best_energy)
                if self.correct_upstream:
                    self.fill_corrected(best_energy, first_layer_energy)

        return {"num_clusters": num_clusters, "best_energy": best_energy}

    def fill_corrected(self, energy, first_layer_energy):
        """Fill the upstream-corrected energy of the reconstructed particle.

        Parameters
        ----------
        energy : float
            Reconstructed energy in GeV
        first_layer_energy : float
            Energy deposited in the first layer in GeV
        """
        if energy <= 0:
            logger.warning(
                "Cannot correct a non-positive cluster energy (%g GeV) for "
                "upstream losses.",
                energy,
            )
            return

        corrected = self.correction(energy, first_layer_energy)
        self.accumulators.fill("energyCorrected", corrected)

    def finalize(self, num_events):
        """Normalize the histograms.

        Per-event histograms are divided by the number of events and the
        reconstructed-particle histograms by the number of reconstructed
        particles. A zero count leaves the corresponding histograms as is.

        Parameters
        ----------
        num_events : int
            Number of events in the sample
        """
        num_clusters = self.accumulators.entry_count("energy")
        for names, count, label in (
            (PER_EVENT_NAMES, num_events, "events"),
            (PER_CLUSTER_NAMES, num_clusters, "reconstructed particles"),
        ):
            if count > 0:
                for name in names:
                    self.accumulators.scale(name, 1.0 / count)
            else:
                logger.warning(
                    "No %s recorded by `%s`, not normalizing: %s",
                    label,
                    self.name,
                    ", ".join(names),
                )
