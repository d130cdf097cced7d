"""
Error Taxonomy

Exceptions raised by the TLE parser and the SGP4/SDP4 propagator.

Malformed TLE input raises a TLEError subclass when the elements are parsed,
so a prediction session is never created from bad data. Numerical failures
during propagation raise a PropagationError subclass carrying the classic
SGP4 error code. "No pass found" is not an error and is reported as None by
the pass finder.
"""

from typing import Optional


# SGP4 error code meanings
SGP4_ERROR_CODES = {
    0: "No error",
    1: "Mean eccentricity < 0.0 or > 1.0",
    2: "Mean motion < 0.0",
    3: "Perturbed eccentricity < 0.0 or > 1.0",
    4: "Semi-latus rectum < 0.0",
    5: "Kepler solver did not converge",
    6: "Satellite has decayed",
}


class SatPredictError(Exception):
    """Base class for all satpredict errors."""


class TLEError(SatPredictError, ValueError):
    """A two-line element set failed validation."""


class TLELengthError(TLEError):
    def __init__(self, line_number: int, length: int):
        self.line_number = line_number
        self.length = length
        super().__init__(
            f"TLE line {line_number} is {length} characters long, expected 69"
        )


class TLEChecksumError(TLEError):
    def __init__(self, line_number: int, expected: int, found: str):
        self.line_number = line_number
        self.expected = expected
        self.found = found
        super().__init__(
            f"TLE line {line_number} checksum mismatch: "
            f"computed {expected}, line carries {found!r}"
        )


class TLECatalogMismatchError(TLEError):
    def __init__(self, catalog1: str, catalog2: str):
        self.catalog1 = catalog1
        self.catalog2 = catalog2
        super().__init__(
            f"TLE catalog numbers differ: line 1 has {catalog1!r}, line 2 has {catalog2!r}"
        )


class TLEFieldError(TLEError):
    """A fixed-column field could not be parsed."""

    def __init__(self, field: str, raw: Optional[str] = None):
        self.field = field
        self.raw = raw
        message = f"Cannot parse TLE field '{field}'"
        if raw is not None:
            message += f": {raw!r}"
        super().__init__(message)


class PropagationError(SatPredictError, RuntimeError):
    """
    Numerical failure while propagating an orbit.

    Attributes
    ----------
    code : int
        SGP4 error code, see SGP4_ERROR_CODES
    tsince : float or None
        Minutes since epoch at which the failure occurred
    """

    def __init__(self, code: int, tsince: Optional[float] = None, detail: str = ""):
        self.code = code
        self.tsince = tsince
        message = SGP4_ERROR_CODES.get(code, f"Unknown error code {code}")
        if tsince is not None:
            message += f" at t={tsince:.3f} min"
        if detail:
            message += f" ({detail})"
        super().__init__(message)


class NonConvergentError(PropagationError):
    """Kepler's equation did not converge within the iteration cap."""

    def __init__(self, tsince: Optional[float] = None, detail: str = ""):
        super().__init__(5, tsince, detail)


class DecayedError(PropagationError):
    """
    The orbit is no longer physical: eccentricity left [0, 1), mean motion or
    semi-latus rectum became negative, or the radius fell inside the Earth.

    This is terminal for the satellite; callers should stop tracking it.
    """
