"""Mapping from calorimeter cell identifiers to layer indexes.

Decoding a cell identifier requires the readout description of the detector,
which is owned by the geometry service. Monitors only need the layer index
of a cell and receive it through a `layer_of(cell_id) -> int` callable. The
decoders in this module are stand-ins for that service.
"""

from abc import ABC, abstractmethod

from calomon.utils.factory import instantiate

__all__ = [
    "LayerDecoder",
    "ConstantLayerDecoder",
    "MappingLayerDecoder",
    "layer_decoder_factory",
    "UNKNOWN_LAYER",
]

# Layer index of cells which cannot be decoded, beyond any first-layer range
UNKNOWN_LAYER = 2**31 - 1


class LayerDecoder(ABC):
    """Parent class of all cell identifier decoders.

    Attributes
    ----------
    name : str
        Name of the decoder (to call it from a configuration file)
    """

    name = None

    @abstractmethod
    def __call__(self, cell_id):
        """Returns the layer index of a cell.

        Parameters
        ----------
        cell_id : int
            Encoded cell identifier

        Returns
        -------
        int
            Layer index
        """
        raise NotImplementedError("Must define the `__call__` function")


class ConstantLayerDecoder(LayerDecoder):
    """Placeholder decoder which assigns every cell to the same layer.

    The default layer is beyond the first-layer range, so that no cell
    contributes to the first-layer energy unless a real decoder is used.
    """

    name = "constant"

    def __init__(self, layer=10):
        """Initialize the decoder.

        Parameters
        ----------
        layer : int, default 10
            Layer index returned for every cell
        """
        self.layer = int(layer)

    def __call__(self, cell_id):
        return self.layer


class MappingLayerDecoder(LayerDecoder):
    """Decoder which looks cells up in an explicit dictionary."""

    name = "mapping"

    def __init__(self, mapping, default=UNKNOWN_LAYER):
        """Initialize the decoder.

        Parameters
        ----------
        mapping : Dict[int, int]
            Maps cell identifiers onto layer indexes
        default : int, default UNKNOWN_LAYER
            Layer index of cells which are not in the mapping. By default
            they never count towards the first layer.
        """
        self.mapping = {int(k): int(v) for k, v in mapping.items()}
        self.default = int(default)

    def __call__(self, cell_id):
        return self.mapping.get(int(cell_id), self.default)


def layer_decoder_factory(cfg):
    """Builds a layer decoder from its configuration.

    Parameters
    ----------
    cfg : Union[str, dict, callable]
        Decoder configuration block, decoder name or any callable which
        maps a cell identifier onto a layer index

    Returns
    -------
    callable
        Layer decoder
    """
    if callable(cfg):
        return cfg

    decoders = {}
    for cls in (ConstantLayerDecoder, MappingLayerDecoder):
        decoders[cls.name] = cls
        decoders[cls.__name__] = cls

    return instantiate(decoders, cfg)
