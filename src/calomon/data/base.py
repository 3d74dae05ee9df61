"""Module with a parent class of all data structures."""

from dataclasses import asdict, dataclass

import numpy as np


@dataclass(eq=False)
class DataBase:
    """Base class of all data structures.

    Defines basic methods shared by all data structures.
    """

    # Fixed-length attributes as (key, size) pairs
    _fixed_length_attrs = ()

    # Attributes specifying coordinates
    _pos_attrs = ()

    # Attributes specifying vector components
    _vec_attrs = ()

    # String attributes
    _str_attrs = ()

    # Euclidean axis labels
    _axes = ("x", "y", "z")

    def __post_init__(self):
        """Immediately called after building the class attributes.

        Provides two functions:
        - Gives default values to array-like attributes and casts the ones
          which are provided as sequences to double precision arrays.
        - Casts strings when they are provided as binary objects, which is
          the format one gets when reading strings from ROOT or HDF5 files.
        """
        # Fixed-length arrays default to NaN-filled arrays
        for attr, size in self._fixed_length_attrs:
            value = getattr(self, attr)
            if value is None:
                setattr(self, attr, np.full(size, np.nan, dtype=np.float64))
            else:
                value = np.asarray(value, dtype=np.float64)
                assert value.shape == (size,), (
                    f"`{attr}` must have {size} components, got shape "
                    f"{value.shape} instead."
                )
                setattr(self, attr, value)

        # Cast stored binary strings back to regular strings
        for attr in self._str_attrs:
            if isinstance(getattr(self, attr), bytes):
                setattr(self, attr, getattr(self, attr).decode())

    def __eq__(self, other):
        """Checks that all attributes of two class instances are the same.

        This overloads the default dataclass `__eq__` method to include an
        appopriate check for vector (numpy) attributes.

        Parameters
        ----------
        other : obj
            Other instance of the same object class

        Returns
        -------
        bool
            `True` if all attributes of both objects are identical
        """
        if self.__class__ != other.__class__:
            return False

        for k, v in self.__dict__.items():
            v_other = getattr(other, k)
            if np.isscalar(v) or v is None:
                if v_other != v:
                    return False
            elif np.shape(v) != np.shape(v_other) or not np.array_equal(
                v, v_other, equal_nan=True
            ):
                return False

        return True

    def as_dict(self):
        """Returns the data class as dictionary of (key, value) pairs.

        Returns
        -------
        dict
            Dictionary of attribute names and their values
        """
        return asdict(self)

    def scalar_dict(self, attrs=None):
        """Returns the data class attributes as a dictionary of scalars.

        Positions and vectors are expanded into one entry per axis, which
        is the format needed to print an object on a single log line or to
        store it as a table row.

        Parameters
        ----------
        attrs : List[str], optional
            List of attribute names to include in the dictionary. If not
            specified, all the attributes are included.

        Returns
        -------
        dict
            Dictionary of scalar values
        """
        scalar_dict = {}
        for attr, value in self.as_dict().items():
            if attrs is not None and attr not in attrs:
                continue

            if np.isscalar(value):
                scalar_dict[attr] = value

            elif attr in (self._pos_attrs + self._vec_attrs):
                for i, v in enumerate(value):
                    scalar_dict[f"{attr}_{self._axes[i]}"] = v

            else:
                raise ValueError(
                    f"Cannot expand the `{attr}` attribute of "
                    f"`{self.__class__.__name__}` to scalar values."
                )

        return scalar_dict

    @property
    def fixed_length_attrs(self):
        """Fetches the fixed-length array attributes as a dictionary.

        Returns
        -------
        Dict[str, int]
            Dictionary which maps fixed-length attributes onto their length
        """
        return dict(self._fixed_length_attrs)
