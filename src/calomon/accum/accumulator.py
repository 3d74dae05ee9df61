"""Fixed-binning histogram accumulators.

An accumulator is a named histogram whose binning is decided once, when it is
built. Afterwards only its contents change, through `fill`, `scale` and
`merge`. The bin contents are held by a `hist.Hist` object with weighted
storage, so that both the sum of weights and the sum of squared weights are
tracked in each bin.
"""

import hist
import numpy as np

__all__ = ["Accumulator", "AccumulatorSet"]


class Accumulator:
    """Named histogram with fixed binning.

    Attributes
    ----------
    name : str
        Name of the accumulator
    title : str
        Human-readable description of the quantity accumulated
    histogram : hist.Hist
        Underlying histogram
    entries : int
        Number of times the accumulator was filled, including fills which
        land in the under/overflow bins
    """

    def __init__(self, name, axes, title=""):
        """Initialize the accumulator.

        Parameters
        ----------
        name : str
            Name of the accumulator
        axes : List[tuple]
            One (bins, low, high) or (bins, low, high, label) tuple per
            dimension of the histogram
        title : str, optional
            Human-readable description of the quantity accumulated
        """
        assert len(name) > 0, "Must provide a non-empty name."
        assert len(axes) > 0, "Must provide at least one axis."

        regular_axes = []
        for i, axis in enumerate(axes):
            bins, low, high, *label = axis
            label = label[0] if label else ""
            if bins < 1:
                raise ValueError(
                    f"Axis {i} of `{name}` must have at least one bin, got {bins}."
                )
            if not high > low:
                raise ValueError(
                    f"Axis {i} of `{name}` must have `high` > `low`, got "
                    f"[{low}, {high}]."
                )
            regular_axes.append(
                hist.axis.Regular(int(bins), low, high, name=f"x{i}", label=label)
            )

        self.name = name
        self.title = title
        self.histogram = hist.Hist(*regular_axes, storage=hist.storage.Weight())
        self.entries = 0

    def __repr__(self):
        """String representation of the accumulator."""
        binning = ", ".join(
            f"({len(ax)}, {ax.edges[0]:g}, {ax.edges[-1]:g})" for ax in self.axes
        )
        return f"Accumulator(name={self.name!r}, axes=[{binning}], entries={self.entries})"

    @property
    def axes(self):
        """Axes of the underlying histogram."""
        return self.histogram.axes

    @property
    def ndim(self):
        """Number of dimensions of the histogram."""
        return self.histogram.ndim

    def edges(self, axis=0):
        """Bin edges along one axis.

        Parameters
        ----------
        axis : int, default 0
            Index of the axis

        Returns
        -------
        np.ndarray
            (N + 1) Bin edges
        """
        return self.histogram.axes[axis].edges

    def fill(self, *values, weight=1.0):
        """Records one entry.

        Parameters
        ----------
        *values : float
            One coordinate per dimension of the histogram
        weight : float, default 1.0
            Weight of the entry
        """
        assert len(values) == self.ndim, (
            f"`{self.name}` is a {self.ndim}D accumulator, got {len(values)} "
            "coordinate(s) to fill it with."
        )
        self.histogram.fill(*values, weight=weight)
        self.entries += 1

    def scale(self, factor):
        """Multiplies all bin contents by a constant.

        Parameters
        ----------
        factor : float
            Scaling factor
        """
        self.histogram *= factor

    def merge(self, other):
        """Adds the content of an accumulator with the same binning.

        Parameters
        ----------
        other : Accumulator
            Accumulator to add to this one
        """
        if other.histogram.axes != self.histogram.axes:
            raise ValueError(
                f"Cannot merge `{other.name}` into `{self.name}`: the binning "
                "of the two accumulators differs."
            )
        self.histogram += other.histogram
        self.entries += other.entries

    def reset(self):
        """Zeroes all bin contents and the entry count."""
        self.histogram.reset()
        self.entries = 0

    def values(self, flow=False):
        """Bin contents (sum of weights in each bin).

        Parameters
        ----------
        flow : bool, default False
            If `True`, include the under/overflow bins

        Returns
        -------
        np.ndarray
            Bin contents
        """
        return self.histogram.values(flow=flow)

    def variances(self, flow=False):
        """Bin variances (sum of squared weights in each bin).

        Parameters
        ----------
        flow : bool, default False
            If `True`, include the under/overflow bins

        Returns
        -------
        np.ndarray
            Bin variances
        """
        return self.histogram.variances(flow=flow)

    def sum(self, flow=False):
        """Sum of all bin contents.

        Parameters
        ----------
        flow : bool, default False
            If `True`, include the under/overflow bins

        Returns
        -------
        float
            Integral of the histogram
        """
        return float(np.sum(self.values(flow=flow)))


class AccumulatorSet:
    """Ordered collection of named accumulators.

    Accumulators are added once, then addressed by name. The set is the
    only state a monitor keeps across events.
    """

    def __init__(self, accumulators=()):
        """Initialize the set.

        Parameters
        ----------
        accumulators : List[Accumulator], optional
            Accumulators to add to the set
        """
        self._accumulators = {}
        for accumulator in accumulators:
            self.add(accumulator)

    def __len__(self):
        """Number of accumulators in the set."""
        return len(self._accumulators)

    def __iter__(self):
        """Iterates over the accumulators, in insertion order."""
        return iter(self._accumulators.values())

    def __contains__(self, name):
        """Checks whether an accumulator name exists in the set."""
        return name in self._accumulators

    def __getitem__(self, name):
        """Fetches an accumulator by name.

        Parameters
        ----------
        name : str
            Name of the accumulator

        Returns
        -------
        Accumulator
            Accumulator with that name
        """
        if name not in self._accumulators:
            raise KeyError(
                f"No accumulator named `{name}`. Available names: {self.names}"
            )

        return self._accumulators[name]

    @property
    def names(self):
        """List of accumulator names, in insertion order."""
        return list(self._accumulators.keys())

    def add(self, accumulator):
        """Adds an accumulator to the set.

        Parameters
        ----------
        accumulator : Accumulator
            Accumulator to add
        """
        assert accumulator.name not in self._accumulators, (
            f"An accumulator named `{accumulator.name}` already exists."
        )
        self._accumulators[accumulator.name] = accumulator

    def fill(self, name, *values, weight=1.0):
        """Records one entry in a named accumulator.

        Parameters
        ----------
        name : str
            Name of the accumulator
        *values : float
            One coordinate per dimension of the accumulator
        weight : float, default 1.0
            Weight of the entry
        """
        self[name].fill(*values, weight=weight)

    def scale(self, name, factor):
        """Multiplies the bin contents of a named accumulator.

        Parameters
        ----------
        name : str
            Name of the accumulator
        factor : float
            Scaling factor
        """
        self[name].scale(factor)

    def entry_count(self, name):
        """Number of fills recorded by a named accumulator.

        Parameters
        ----------
        name : str
            Name of the accumulator

        Returns
        -------
        int
            Number of entries
        """
        return self[name].entries

    def merge(self, other):
        """Adds the content of another set, accumulator by accumulator.

        Parameters
        ----------
        other : AccumulatorSet
            Set of accumulators with the same names and binning
        """
        if set(other.names) != set(self.names):
            raise ValueError(
                "Cannot merge accumulator sets with different names: "
                f"{sorted(set(other.names) ^ set(self.names))}"
            )
        for accumulator in other:
            self[accumulator.name].merge(accumulator)

    def reset(self):
        """Zeroes every accumulator in the set."""
        for accumulator in self:
            accumulator.reset()
