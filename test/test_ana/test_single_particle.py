"""Tests for the single-particle reconstruction monitor."""

import logging
from unittest.mock import MagicMock

import numpy as np
import pytest
from conftest import HIT_COLL, cluster_at, make_event, particle_along

from calomon.accum import DUPLICATE_NAMES
from calomon.ana.metric import SingleParticleRecoAna
from calomon.data import CaloHit, TrueParticle
from calomon.math import ETA_LIMIT
from calomon.utils.errors import RunStateError
from calomon.utils.logger import logger


def bin_content(acc, *values):
    """Content of the bin which contains a set of coordinates."""
    index = tuple(ax.index(v) for ax, v in zip(acc.axes, values))
    return acc.values()[index]


def total_entries(monitor):
    """Number of fills over all the histograms of a monitor."""
    return sum(acc.entries for acc in monitor.accumulators)


class TestConfiguration:
    """Test the construction of the monitor."""

    def test_default(self, monitor_cfg):
        """Without fit parameters, no correction is applied."""
        monitor = SingleParticleRecoAna(**monitor_cfg)
        assert not monitor.correct_upstream
        assert monitor.correction is None
        assert len(monitor.accumulators) == 18
        assert monitor.num_events == 0
        assert not monitor.finished

    def test_upstream(self, monitor_cfg):
        """Providing fit parameters enables the correction."""
        monitor = SingleParticleRecoAna(**monitor_cfg, upstream_params=[1, 2, 3, 4])
        assert monitor.correct_upstream
        assert monitor.correction.params == (1.0, 2.0, 3.0, 4.0)
        assert monitor.max_layer == 5
        assert monitor.layer_of(0) == 10

    @pytest.mark.parametrize(
        "update",
        [
            {"energy": 0.0},
            {"eta_max": -1.0},
            {"num_eta": 0},
            {"num_phi": 0},
            {"d_eta": 0.0},
            {"d_phi": -0.1},
            {"upstream_params": [1.0, 2.0]},
        ],
    )
    def test_bad_parameters(self, monitor_cfg, update):
        """Invalid run parameters are rejected."""
        monitor_cfg.update(update)
        with pytest.raises(ValueError):
            SingleParticleRecoAna(**monitor_cfg)


class TestScenarios:
    """Test reference single-event scenarios."""

    def test_single_cluster_along_beam(self, monitor_cfg):
        """One particle along z, one cluster at eta = phi = 0."""
        monitor = SingleParticleRecoAna(**monitor_cfg)
        particle = TrueParticle(vertex=[0, 0, 0], momentum=[0.0, 0.0, 10.0])
        event = make_event([particle], [cluster_at(0.0, 0.0, 9.8)])
        result = monitor(event)

        acc = monitor.accumulators
        assert result == {"num_clusters": 1, "best_energy": 9.8}
        assert acc.entry_count("clusters") == 1
        assert bin_content(acc["clusters"], 1) == 1.0
        assert acc.entry_count("energy") == 1
        assert bin_content(acc["energy"], 9.8) == 1.0
        assert acc.entry_count("energyTotal") == 1

        # The eta residual (0 - true eta) ends up in the underflow bin
        assert acc.entry_count("eta") == 1
        assert acc["eta"].values(flow=True)[0] == pytest.approx(9.8)
        assert acc["eta"].sum() == 0.0
        assert particle.eta == ETA_LIMIT

        # The phi residual is zero
        assert acc.entry_count("phi") == 1
        assert bin_content(acc["phi"], 0.0) == pytest.approx(9.8)

        for name in DUPLICATE_NAMES:
            assert acc.entry_count(name) == 0
        assert acc.entry_count("energyCorrected") == 0

    def test_two_clusters(self, monitor_cfg):
        """The most energetic cluster is the particle, the other a duplicate."""
        monitor = SingleParticleRecoAna(**monitor_cfg)
        best = cluster_at(0.105, 0.205, 9.0)
        other = cluster_at(0.155, 0.255, 3.0)
        event = make_event([particle_along(0.105, 0.205)], [other, best])
        monitor(event)

        acc = monitor.accumulators
        assert acc.entry_count("energy") == 1
        assert bin_content(acc["energy"], 9.0) == 1.0
        assert bin_content(acc["energyTotal"], 12.0) == 1.0
        assert bin_content(acc["clusters"], 2) == 1.0
        assert bin_content(acc["clusters_phi"], 0.205, 2) == 1.0
        assert bin_content(acc["clusters_eta"], 0.105, 2) == 1.0

        for name in DUPLICATE_NAMES:
            assert acc.entry_count(name) == 1
        assert bin_content(acc["energy_diff"], (9.0 - 3.0) / 10.0) == 1.0
        assert bin_content(acc["energy_duplicates"], 3.0) == 1.0
        assert bin_content(acc["eta_diff"], -0.05) == 1.0
        assert bin_content(acc["phi_diff"], -0.05) == 1.0
        assert bin_content(acc["eta_duplicates"], 0.155) == 1.0
        assert bin_content(acc["phi_duplicates"], 0.255) == 1.0

        r_diff = np.sqrt(0.205**2 + 0.105**2) - np.sqrt(0.255**2 + 0.155**2)
        assert bin_content(acc["R_diff"], r_diff) == 1.0

    def test_no_particle_collection(self, monitor_cfg):
        """Events without a particle collection are skipped."""
        monitor = SingleParticleRecoAna(**monitor_cfg)
        event = make_event(None, [cluster_at(0.0, 0.0, 9.8)])
        assert monitor(event) is None
        assert total_entries(monitor) == 0
        assert monitor.skip_counts["no_particles"] == 1

    def test_missing_hits_with_correction(self, monitor_cfg):
        """With the correction enabled, events without hits are skipped."""
        monitor = SingleParticleRecoAna(**monitor_cfg, upstream_params=[0.1, 0.01, 0, 0])
        monitor.correction = MagicMock(wraps=monitor.correction)
        event = make_event([particle_along(0.0, 0.0)], [cluster_at(0.0, 0.0, 9.8)])
        assert monitor(event) is None
        assert total_entries(monitor) == 0
        assert monitor.skip_counts["no_hits"] == 1
        monitor.correction.assert_not_called()

    def test_finalize_normalization(self, monitor_cfg):
        """Per-event histograms divide by 100, per-particle ones by 80."""
        monitor = SingleParticleRecoAna(**monitor_cfg)
        for i in range(100):
            clusters = [cluster_at(0.0, 0.0, 9.8)] if i < 80 else None
            monitor(make_event([particle_along(0.0, 0.0)], clusters, index=i))

        clusters_before = monitor.accumulators["clusters"].values().copy()
        energy_before = monitor.accumulators["energy"].values().copy()
        assert monitor.num_events == 100
        assert monitor.accumulators.entry_count("energy") == 80

        monitor.finish()
        np.testing.assert_allclose(
            monitor.accumulators["clusters"].values(), clusters_before / 100
        )
        np.testing.assert_allclose(
            monitor.accumulators["energy"].values(), energy_before / 80
        )
        assert monitor.accumulators["energy"].sum() == pytest.approx(1.0)
        assert monitor.accumulators["clusters"].sum() == pytest.approx(0.8)
        assert monitor.skip_counts["no_clusters"] == 20


class TestClassification:
    """Test the classification of clusters into particle and duplicates."""

    @pytest.mark.parametrize("num_clusters", [2, 3, 5, 8])
    def test_unique_maximum(self, monitor_cfg, num_clusters):
        """Exactly one particle and N - 1 duplicates."""
        rng = np.random.default_rng(seed=num_clusters)
        energies = rng.permutation(np.linspace(0.5, 9.5, num_clusters))
        clusters = [
            cluster_at(eta, phi, e)
            for eta, phi, e in zip(
                rng.uniform(-1, 1, num_clusters), rng.uniform(-3, 3, num_clusters), energies
            )
        ]
        monitor = SingleParticleRecoAna(**monitor_cfg)
        monitor(make_event([particle_along(0.0, 0.0)], clusters))

        assert monitor.accumulators.entry_count("energy") == 1
        for name in DUPLICATE_NAMES:
            assert monitor.accumulators.entry_count(name) == num_clusters - 1

    @pytest.mark.parametrize("energy", [0.0, 0.1, 10.0, 50.0])
    def test_single_cluster_is_best(self, monitor_cfg, energy):
        """A lone cluster is never a duplicate, whatever its energy."""
        monitor = SingleParticleRecoAna(**monitor_cfg)
        monitor(make_event([particle_along(0.0, 0.0)], [cluster_at(0.3, 0.3, energy)]))
        assert monitor.accumulators.entry_count("energy") == 1
        for name in DUPLICATE_NAMES:
            assert monitor.accumulators.entry_count(name) == 0

    def test_first_maximum_wins(self, monitor_cfg):
        """The best cluster position is that of the first maximum."""
        monitor = SingleParticleRecoAna(**monitor_cfg)
        clusters = [cluster_at(0.505, 1.005, 5.0), cluster_at(-0.505, -1.005, 5.0)]
        monitor(make_event([particle_along(0.0, 0.0)], clusters))
        acc = monitor.accumulators
        assert bin_content(acc["clusters_eta"], 0.505, 2) == 1.0
        assert bin_content(acc["clusters_phi"], 1.005, 2) == 1.0

        # Clusters tied with the maximum are not duplicates
        assert acc.entry_count("energy") == 2
        assert acc.entry_count("energy_duplicates") == 0

    def test_energy_diff_range(self, monitor_cfg):
        """The fractional energy gap of duplicates lies in [0, 1)."""
        rng = np.random.default_rng(seed=0)
        monitor = SingleParticleRecoAna(**monitor_cfg)
        for i in range(50):
            num = rng.integers(1, 6)
            clusters = [
                cluster_at(rng.uniform(-1, 1), rng.uniform(-3, 3), e)
                for e in rng.uniform(0.0, 10.0, num)
            ]
            monitor(make_event([particle_along(0.0, 0.0)], clusters, index=i))

        values = monitor.accumulators["energy_diff"].values(flow=True)
        assert values[0] == 0.0
        assert values[-1] == 0.0
        assert values.sum() == monitor.accumulators.entry_count("energy_diff")

    def test_multiplicity_entries(self, monitor_cfg):
        """One multiplicity entry per event with a cluster collection."""
        monitor = SingleParticleRecoAna(**monitor_cfg)
        particle = particle_along(0.0, 0.0)
        events = [
            make_event([particle], [cluster_at(0.0, 0.0, 9.0)]),
            make_event([particle], [cluster_at(0.0, 0.0, 9.0), cluster_at(0.1, 0.1, 1.0)]),
            make_event([particle], None),
            make_event(None, [cluster_at(0.0, 0.0, 9.0)]),
            make_event([particle], []),
        ]
        for event in events:
            monitor(event)

        acc = monitor.accumulators
        assert acc.entry_count("clusters") == 3
        assert bin_content(acc["clusters"], 0) == 1.0
        assert bin_content(acc["clusters"], 1) == 1.0
        assert bin_content(acc["clusters"], 2) == 1.0
        assert acc.entry_count("energy") == 2

    def test_residuals_weighted(self, monitor_cfg):
        """Angular residuals are weighted by the cluster energy."""
        monitor = SingleParticleRecoAna(**monitor_cfg)
        monitor(make_event([particle_along(0.205, 0.405)], [cluster_at(0.235, 0.385, 7.0)]))
        acc = monitor.accumulators
        assert bin_content(acc["eta"], 0.03) == pytest.approx(7.0)
        assert bin_content(acc["phi"], -0.02) == pytest.approx(7.0)
        assert bin_content(acc["eta_eta"], 0.205, 0.03) == pytest.approx(7.0)
        assert bin_content(acc["phi_phi"], 0.405, -0.02) == pytest.approx(7.0)
        assert bin_content(acc["energy_phi"], 0.405, 7.0) == 1.0


class TestParticles:
    """Test the handling of the generated particle collection."""

    def test_multiple_particles(self, monitor_cfg, caplog):
        """The last particle is used and a warning is issued."""
        monitor = SingleParticleRecoAna(**monitor_cfg)
        particles = [particle_along(0.5, 0.0), particle_along(0.0, 0.0)]
        monitor(make_event(particles, [cluster_at(0.0, 0.0, 6.0)]))

        assert "not a single particle event" in caplog.text
        acc = monitor.accumulators
        assert bin_content(acc["eta"], 0.0) == pytest.approx(6.0)
        assert acc["eta"].values(flow=True)[0] == 0.0

    def test_empty_particle_collection(self, monitor_cfg):
        """An empty particle collection skips the event."""
        monitor = SingleParticleRecoAna(**monitor_cfg)
        assert monitor(make_event([], [cluster_at(0.0, 0.0, 6.0)])) is None
        assert total_entries(monitor) == 0
        assert monitor.skip_counts["no_particles"] == 1

    def test_missing_collection_logged(self, monitor_cfg, caplog):
        """Missing collections are logged with their name."""
        monitor = SingleParticleRecoAna(**monitor_cfg)
        monitor(make_event([particle_along(0.0, 0.0)], None))
        assert "No `CaloClusters` collection in the event." in caplog.text

    def test_verbose(self, monitor_cfg, caplog):
        """Verbose mode traces particles and clusters."""
        caplog.set_level(logging.INFO, logger="calomon")
        monitor = SingleParticleRecoAna(**monitor_cfg, verbose=True)
        monitor(make_event([particle_along(0.0, 0.0)], [cluster_at(0.0, 0.0, 6.0)]))
        assert "Particle at" in caplog.text
        assert "Number of clusters: 1" in caplog.text
        assert "Cluster reconstructed at" in caplog.text

    def test_verbose_default_level(self, monitor_cfg, caplog):
        """Verbose mode is visible without configuring the logger first."""
        logger.setLevel(logging.NOTSET)
        try:
            monitor = SingleParticleRecoAna(**monitor_cfg, verbose=True)
            assert logger.getEffectiveLevel() == logging.INFO
            monitor(make_event([particle_along(0.0, 0.0)], [cluster_at(0.0, 0.0, 6.0)]))
        finally:
            logger.setLevel(logging.NOTSET)

        assert "Particle at" in caplog.text
        assert "Cluster reconstructed at" in caplog.text

    def test_quiet_default_level(self, monitor_cfg):
        """Without verbose mode the logger level is left alone."""
        logger.setLevel(logging.NOTSET)
        SingleParticleRecoAna(**monitor_cfg)
        assert logger.level == logging.NOTSET


class TestUpstreamCorrection:
    """Test the upstream energy correction in the monitor."""

    def test_corrected_energy(self, monitor_cfg, first_layer_hits):
        """The corrected energy uses the first layer energy."""
        monitor = SingleParticleRecoAna(
            **monitor_cfg,
            upstream_params=[0.1, 0.01, 5.0, 5.0],
            layer_of=lambda cell_id: cell_id,
        )
        assert monitor.first_layer_energy(first_layer_hits) == pytest.approx(1.0)

        event = make_event(
            [particle_along(0.0, 0.0)], [cluster_at(0.0, 0.0, 9.0)], first_layer_hits
        )
        monitor(event)

        expected = 9.0 + (0.1 + 0.01 * 9.0) + (0.1 + 0.01 / 3.0) * 1.0
        acc = monitor.accumulators
        assert acc.entry_count("energyCorrected") == 1
        assert bin_content(acc["energyCorrected"], expected) == 1.0

    def test_placeholder_decoder(self, monitor_cfg, first_layer_hits):
        """The placeholder decoder puts no cell in the first layer."""
        monitor = SingleParticleRecoAna(**monitor_cfg, upstream_params=[0.1, 0.01, 0, 0])
        assert monitor.first_layer_energy(first_layer_hits) == 0.0

    def test_decoder_from_config(self, monitor_cfg):
        """The decoder can be configured as a block."""
        monitor = SingleParticleRecoAna(
            **monitor_cfg,
            upstream_params=[0.1, 0.01, 0, 0],
            layer_of={"name": "mapping", "mapping": {7: 0}, "default": 99},
            first_layer_count=1,
            first_layer_offset=0,
        )
        hits = [CaloHit(cell_id=7, energy=0.3), CaloHit(cell_id=8, energy=0.5)]
        assert monitor.first_layer_energy(hits) == pytest.approx(0.3)

    def test_unmapped_cells_outside_first_layer(self, monitor_cfg):
        """Cells missing from the mapping add no first layer energy."""
        monitor = SingleParticleRecoAna(
            **monitor_cfg,
            upstream_params=[0.1, 0.01, 0, 0],
            layer_of={"name": "mapping", "mapping": {7: 0}},
        )
        hits = [CaloHit(cell_id=7, energy=0.3), CaloHit(cell_id=12345, energy=5.0)]
        assert monitor.first_layer_energy(hits) == pytest.approx(0.3)

    def test_custom_hit_collection(self, monitor_cfg, first_layer_hits):
        """The hit collection name is configurable."""
        monitor = SingleParticleRecoAna(
            **monitor_cfg, upstream_params=[0.1, 0.01, 0, 0], hit_coll_name="Cells"
        )
        event = make_event(
            [particle_along(0.0, 0.0)], [cluster_at(0.0, 0.0, 9.0)], first_layer_hits
        )
        assert HIT_COLL != "Cells"
        assert monitor(event) is None
        assert monitor.skip_counts["no_hits"] == 1

    def test_zero_energy_not_corrected(self, monitor_cfg, caplog):
        """A zero-energy best cluster is not corrected."""
        monitor = SingleParticleRecoAna(**monitor_cfg, upstream_params=[0.1, 0.01, 0, 0])
        event = make_event([particle_along(0.0, 0.0)], [cluster_at(0.0, 0.0, 0.0)], [])
        monitor(event)
        assert monitor.accumulators.entry_count("energy") == 1
        assert monitor.accumulators.entry_count("energyCorrected") == 0
        assert "non-positive cluster energy" in caplog.text


class TestRunLifecycle:
    """Test the finalization and merging of monitors."""

    def test_finish_once(self, monitor_cfg):
        """The normalization is applied exactly once."""
        monitor = SingleParticleRecoAna(**monitor_cfg)
        for _ in range(4):
            monitor(make_event([particle_along(0.0, 0.0)], [cluster_at(0.0, 0.0, 5.0)]))

        monitor.finish()
        assert monitor.finished
        assert monitor.accumulators["clusters"].sum() == pytest.approx(1.0)

        with pytest.raises(RunStateError):
            monitor.finish()
        assert monitor.accumulators["clusters"].sum() == pytest.approx(1.0)

        with pytest.raises(RunStateError):
            monitor(make_event([particle_along(0.0, 0.0)], [cluster_at(0.0, 0.0, 5.0)]))

    def test_explicit_event_count(self, monitor_cfg):
        """The number of events can be provided explicitly."""
        monitor = SingleParticleRecoAna(**monitor_cfg)
        monitor(make_event([particle_along(0.0, 0.0)], [cluster_at(0.0, 0.0, 5.0)]))
        monitor.finish(num_events=4)
        assert monitor.accumulators["energyTotal"].sum() == pytest.approx(0.25)
        assert monitor.accumulators["energy"].sum() == pytest.approx(1.0)

    def test_duplicates_not_normalized(self, monitor_cfg):
        """Duplicate histograms keep their raw counts."""
        monitor = SingleParticleRecoAna(**monitor_cfg)
        clusters = [cluster_at(0.0, 0.0, 9.0), cluster_at(0.01, 0.01, 1.0)]
        for _ in range(3):
            monitor(make_event([particle_along(0.0, 0.0)], clusters))
        monitor.finish()
        assert monitor.accumulators["energy_duplicates"].sum() == pytest.approx(3.0)

    def test_zero_counts(self, monitor_cfg, caplog):
        """Empty runs are reported and never produce NaN contents."""
        monitor = SingleParticleRecoAna(**monitor_cfg)
        monitor(make_event(None, None))
        monitor.finish(num_events=0)

        assert "No events recorded" in caplog.text
        assert "No reconstructed particles recorded" in caplog.text
        for acc in monitor.accumulators:
            assert np.isfinite(acc.values(flow=True)).all()

    def test_no_clusters_only(self, monitor_cfg, caplog):
        """Events without clusters still normalize the per-event histograms."""
        monitor = SingleParticleRecoAna(**monitor_cfg)
        monitor(make_event([particle_along(0.0, 0.0)], []))
        monitor(make_event([particle_along(0.0, 0.0)], []))
        monitor.finish()

        assert monitor.accumulators["clusters"].sum() == pytest.approx(1.0)
        assert "No reconstructed particles recorded" in caplog.text
        for acc in monitor.accumulators:
            assert np.isfinite(acc.values(flow=True)).all()

    def test_merge(self, monitor_cfg):
        """Monitors filled separately merge into the same result."""
        events = [
            make_event([particle_along(0.0, 0.0)], [cluster_at(0.0, 0.0, e)], index=i)
            for i, e in enumerate([8.0, 9.0, 9.5, 10.0, 10.5])
        ]
        single = SingleParticleRecoAna(**monitor_cfg)
        for event in events:
            single(event)

        first = SingleParticleRecoAna(**monitor_cfg)
        second = SingleParticleRecoAna(**monitor_cfg)
        for event in events[:2]:
            first(event)
        for event in events[2:]:
            second(event)
        first.merge(second)

        assert first.num_events == 5
        single.finish()
        first.finish()
        for acc in single.accumulators:
            np.testing.assert_allclose(
                first.accumulators[acc.name].values(flow=True), acc.values(flow=True)
            )

    def test_merge_finished(self, monitor_cfg):
        """Finalized monitors cannot be merged."""
        first = SingleParticleRecoAna(**monitor_cfg)
        second = SingleParticleRecoAna(**monitor_cfg)
        second.finish()
        with pytest.raises(RunStateError):
            first.merge(second)
