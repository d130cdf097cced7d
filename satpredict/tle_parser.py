"""
TLE Parser Module

Parses and validates NORAD Two-Line Element (TLE) sets into orbital elements
in the units expected by the SGP4/SDP4 propagator.

Each element line must be exactly 69 characters, carry a valid modulo-10
checksum in its last column, and both lines must reference the same catalog
number. Fixed-column fields are decoded according to the NORAD format,
including the implied decimal point of the eccentricity and the
implied-decimal/exponent notation of the second mean motion derivative and
the B* drag term.

References:
    Kelso, T.S. "CelesTrak TLE Format Documentation"
    https://celestrak.org/columns/v04n03/
"""

import logging
import math
from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Tuple

from config import MINUTES_PER_DAY, TWO_PI
from satpredict.errors import (
    TLECatalogMismatchError,
    TLEChecksumError,
    TLEFieldError,
    TLELengthError,
)
from satpredict.timeconv import epoch_to_datetime, epoch_to_julian

logger = logging.getLogger(__name__)

DEG2RAD = math.pi / 180.0
RAD2DEG = 180.0 / math.pi
XPDOTP = MINUTES_PER_DAY / TWO_PI  # rev/day per rad/min

TLE_LINE_LENGTH = 69

# Alpha-5 catalog numbers: the leading digit is replaced by a letter, I and O skipped
_ALPHA5 = "ABCDEFGHJKLMNPQRSTUVWXYZ"


@dataclass(frozen=True)
class OrbitalElements:
    """
    Orbital elements of one TLE, normalised to propagator units.

    Angles are in radians, mean motion in rad/min and its derivatives in
    rad/min² and rad/min³. The raw lines are kept for reference.
    """

    name: str
    catalog_number: int
    classification: str
    international_designator: str
    epoch_year: int
    epoch_day: float
    epoch_jd: float
    ndot: float
    nddot: float
    bstar: float
    inclination: float
    raan: float
    eccentricity: float
    arg_perigee: float
    mean_anomaly: float
    mean_motion: float
    revolution_number: int
    element_number: int
    checksum1: int
    checksum2: int
    line1: str
    line2: str

    @property
    def epoch(self) -> datetime:
        return epoch_to_datetime(self.epoch_year, self.epoch_day)

    @property
    def mean_motion_rev_per_day(self) -> float:
        return self.mean_motion * XPDOTP

    @property
    def period_minutes(self) -> float:
        """Nominal (Kozai) orbital period."""
        return TWO_PI / self.mean_motion

    @property
    def inclination_deg(self) -> float:
        return self.inclination * RAD2DEG

    @property
    def raan_deg(self) -> float:
        return self.raan * RAD2DEG

    @property
    def arg_perigee_deg(self) -> float:
        return self.arg_perigee * RAD2DEG

    @property
    def mean_anomaly_deg(self) -> float:
        return self.mean_anomaly * RAD2DEG


def checksum(line: str) -> int:
    """
    Modulo-10 checksum of a TLE line.

    Digits count their value, '-' counts 1, everything else 0. Only the first
    68 columns contribute; column 69 holds the checksum itself.
    """
    total = 0
    for char in line[:TLE_LINE_LENGTH - 1]:
        if char.isdigit():
            total += int(char)
        elif char == "-":
            total += 1
    return total % 10


def _parse_float(field: str, raw: str) -> float:
    try:
        return float(raw)
    except ValueError:
        raise TLEFieldError(field, raw) from None


def _parse_int(field: str, raw: str, blank_ok: bool = False) -> int:
    text = raw.strip()
    if not text and blank_ok:
        return 0
    try:
        return int(text)
    except ValueError:
        raise TLEFieldError(field, raw) from None


def _parse_catalog(raw: str) -> int:
    text = raw.strip()
    if text and text[0].upper() in _ALPHA5:
        rest = text[1:]
        if not rest.isdigit():
            raise TLEFieldError("catalog_number", raw)
        return (_ALPHA5.index(text[0].upper()) + 10) * 10000 + int(rest)
    return _parse_int("catalog_number", raw)


def exp_to_dec(field: str, raw: str) -> float:
    """
    Decode TLE implied-decimal exponential notation, e.g. ' 17130-3' -> 0.17130e-3.

    Parameters
    ----------
    field : str
        Field name, used in the error raised on malformed input
    raw : str
        The 8-column field: sign, five mantissa digits, signed exponent digit
    """
    text = raw.strip()
    if not text:
        return 0.0

    sign = 1.0
    if text[0] in "+-":
        sign = -1.0 if text[0] == "-" else 1.0
        text = text[1:]

    # Split mantissa from the trailing signed exponent
    exp_pos = max(text.rfind("-"), text.rfind("+"))
    if exp_pos <= 0:
        raise TLEFieldError(field, raw)
    mantissa, exponent = text[:exp_pos], text[exp_pos:]
    mantissa = mantissa.replace(" ", "0").lstrip(".")

    if not mantissa.isdigit():
        raise TLEFieldError(field, raw)
    try:
        power = int(exponent)
    except ValueError:
        raise TLEFieldError(field, raw) from None

    return sign * float("0." + mantissa) * 10.0 ** power


def _validate_line(line: str, line_number: int) -> str:
    line = line.rstrip()
    if len(line) != TLE_LINE_LENGTH:
        raise TLELengthError(line_number, len(line))
    if line[0] != str(line_number):
        raise TLEFieldError("line_number", line[0])

    expected = checksum(line)
    if line[-1] != str(expected):
        raise TLEChecksumError(line_number, expected, line[-1])
    return line


def parse_tle(name: str, line1: str, line2: str) -> OrbitalElements:
    """
    Parse and validate a two-line element set.

    Parameters
    ----------
    name : str
        Satellite display name
    line1 : str
        First element line
    line2 : str
        Second element line

    Returns
    -------
    OrbitalElements
        Elements in propagator units

    Raises
    ------
    TLELengthError, TLEChecksumError, TLECatalogMismatchError, TLEFieldError
    """
    line1 = _validate_line(line1, 1)
    line2 = _validate_line(line2, 2)

    if line1[2:7] != line2[2:7]:
        raise TLECatalogMismatchError(line1[2:7], line2[2:7])

    # Line 1 - exact field positions
    catalog_number = _parse_catalog(line1[2:7])
    classification = line1[7].strip() or "U"
    designator = line1[9:17].strip()
    two_digit_year = _parse_int("epoch_year", line1[18:20])
    epoch_day = _parse_float("epoch_day", line1[20:32])
    ndot = _parse_float("ndot", line1[33:43])
    nddot = exp_to_dec("nddot", line1[44:52])
    bstar = exp_to_dec("bstar", line1[53:61])
    element_number = _parse_int("element_number", line1[64:68], blank_ok=True)

    # Line 2 - exact field positions
    inclination = _parse_float("inclination", line2[8:16])
    raan = _parse_float("raan", line2[17:25])
    ecc_digits = line2[26:33].strip()
    if not ecc_digits.isdigit():
        raise TLEFieldError("eccentricity", line2[26:33])
    eccentricity = float("0." + ecc_digits)
    arg_perigee = _parse_float("arg_perigee", line2[34:42])
    mean_anomaly = _parse_float("mean_anomaly", line2[43:51])
    mean_motion = _parse_float("mean_motion", line2[52:63])
    revolution_number = _parse_int("revolution_number", line2[63:68], blank_ok=True)

    if not 0.0 <= inclination <= 180.0:
        raise TLEFieldError("inclination", line2[8:16])
    if not 0.0 < epoch_day < 367.0:
        raise TLEFieldError("epoch_day", line1[20:32])

    # Epoch year correction
    epoch_year = 1900 + two_digit_year if two_digit_year >= 57 else 2000 + two_digit_year

    elements = OrbitalElements(
        name=name.strip(),
        catalog_number=catalog_number,
        classification=classification,
        international_designator=designator,
        epoch_year=epoch_year,
        epoch_day=epoch_day,
        epoch_jd=epoch_to_julian(epoch_year, epoch_day),
        ndot=ndot * TWO_PI / (MINUTES_PER_DAY ** 2),
        nddot=nddot * TWO_PI / (MINUTES_PER_DAY ** 3),
        bstar=bstar,
        inclination=inclination * DEG2RAD,
        raan=raan * DEG2RAD,
        eccentricity=eccentricity,
        arg_perigee=arg_perigee * DEG2RAD,
        mean_anomaly=mean_anomaly * DEG2RAD,
        mean_motion=mean_motion / XPDOTP,
        revolution_number=revolution_number,
        element_number=element_number,
        checksum1=int(line1[-1]),
        checksum2=int(line2[-1]),
        line1=line1,
        line2=line2,
    )
    logger.debug(
        f"Parsed TLE {elements.catalog_number} ({elements.name}): "
        f"epoch {epoch_year}/{epoch_day:.8f}, n={mean_motion:.8f} rev/day"
    )
    return elements


def split_tle_text(text: str) -> Tuple[Optional[str], str, str]:
    """Split a 2- or 3-line TLE block into (name, line1, line2)."""
    lines = [line.rstrip() for line in text.strip().splitlines() if line.strip()]
    if len(lines) == 3:
        name = lines[0][2:] if lines[0].startswith("0 ") else lines[0]
        return name.strip(), lines[1], lines[2]
    if len(lines) == 2:
        return None, lines[0], lines[1]
    raise TLEFieldError("line_count", str(len(lines)))


def parse_tle_text(text: str, name: Optional[str] = None) -> OrbitalElements:
    """
    Parse a TLE block as distributed by CelesTrak, with optional name line.

    An explicit name overrides the block's name line. Without either, the
    satellite is named after its catalog number.
    """
    block_name, line1, line2 = split_tle_text(text)
    display_name = name or block_name or f"SAT_{line1[2:7].strip()}"
    return parse_tle(display_name, line1, line2)
