"""Typed exceptions raised by the monitoring tools."""


class CalomonError(Exception):
    """Base exception for all monitoring errors."""


class RunStateError(CalomonError, RuntimeError):
    """Raised when a monitor is used outside of its run lifecycle.

    A monitor accepts events until it is finalized. Once finalized, its
    accumulators are normalized and must neither be filled, merged nor
    scaled a second time.
    """
