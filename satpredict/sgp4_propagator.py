"""
SGP4/SDP4 Orbit Propagator

Native implementation of the SGP4 algorithm as revised by Vallado et al.
(2006) "Revisiting Spacetrack Report #3" (AAS 06-675), including the SDP4
deep-space branch for orbits with a period of 225 minutes or more.

Implementation details:
- WGS-72 gravitational constants (see config.py)
- Method chosen once at initialisation: 'n' near-Earth, 'd' deep-space
- Simplified drag model (isimp) for perigees below 220 km and all deep-space orbits
- Perigee-dependent atmospheric density parameters below 156 km and 98 km
- Lunar-solar periodics and 12 h / 24 h resonance integration in deep_space.py
- Newton-Raphson Kepler solver with ±0.95 step clamp

Positions and velocities are returned in the TEME inertial frame in km and
km/s. Numerical failures raise a PropagationError subclass carrying the
classic SGP4 error code; nothing is recovered silently.

References:
- Vallado, D. A., et al. (2006). "Revisiting Spacetrack Report #3." AIAA 2006-6753
- Hoots, F. R., & Roehrich, R. L. (1980). "Spacetrack Report No. 3"
"""

import logging
import math
from typing import NamedTuple, Optional, Tuple

import numpy as np

from config import (
    DEEP_SPACE_PERIOD_MINUTES,
    EARTH_RADIUS_KM,
    GRAVITATIONAL_PARAMETER,
    J2,
    J3,
    J4,
    TWO_PI,
)
from satpredict import deep_space
from satpredict.errors import DecayedError, NonConvergentError
from satpredict.timeconv import gmst
from satpredict.tle_parser import OrbitalElements

logger = logging.getLogger(__name__)

# Derived gravity constants
XKE = 60.0 / math.sqrt(EARTH_RADIUS_KM ** 3 / GRAVITATIONAL_PARAMETER)
J3OJ2 = J3 / J2
X2O3 = 2.0 / 3.0
VKMPERSEC = EARTH_RADIUS_KM * XKE / 60.0

# Atmospheric density parameters (earth radii)
SS = 78.0 / EARTH_RADIUS_KM + 1.0
QZMS2T = ((120.0 - 78.0) / EARTH_RADIUS_KM) ** 4

# Days since 1950 January 0.0 are counted from this Julian date
JD_1950 = 2433281.5

# Kepler solver limits
KEPLER_TOLERANCE = 1.0e-12
KEPLER_MAX_ITERATIONS = 10
KEPLER_CONVERGED = 1.0e-6

# Guard for the 180 degree inclination singularity
TEMP4 = 1.5e-12


class MeanElements(NamedTuple):
    """Singly averaged mean elements from the last propagation."""

    semi_major_axis: float  # earth radii
    eccentricity: float
    inclination: float
    raan: float
    arg_perigee: float
    mean_anomaly: float
    mean_motion: float  # rad/min
    phase: float  # mean anomaly after lunar-solar and long-period terms


class SGP4Propagator:
    """
    SGP4/SDP4 propagator for one set of orbital elements.

    Construction runs the initialisation and checks the epoch state; calls to
    propagate() are then cheap. Deep-space propagators keep resonance
    integrator state between calls, so one instance must not be shared
    between threads without external locking.

    Args:
        elements: Parsed TLE elements

    Raises:
        DecayedError: Elements describe a non-physical orbit at epoch
    """

    def __init__(self, elements: OrbitalElements):
        self.elements = elements
        self.method = "n"
        self.isimp = 0
        self.lunar_solar: Optional[deep_space.LunarSolarTerms] = None
        self.resonance_state: Optional[deep_space.ResonanceState] = None
        self.last_mean: Optional[MeanElements] = None
        self.sgp4init()

    @property
    def is_deep_space(self) -> bool:
        return self.method == "d"

    @property
    def period_minutes(self) -> float:
        """Anomalistic period from the un-Kozai'd mean motion."""
        return TWO_PI / self.no_unkozai

    @property
    def resonance(self) -> int:
        """0 without resonance, 1 synchronous (24 h), 2 half-day (12 h)."""
        if self.resonance_state is None:
            return 0
        return self.resonance_state.irez

    def _initl(self):
        """Recover the un-Kozai'd mean motion and epoch geometry."""
        el = self.elements
        self.ecco = el.eccentricity
        self.inclo = el.inclination
        self.nodeo = el.raan
        self.argpo = el.arg_perigee
        self.mo = el.mean_anomaly
        self.bstar = el.bstar
        self.epoch = el.epoch_jd - JD_1950

        self.eccsq = self.ecco * self.ecco
        self.omeosq = 1.0 - self.eccsq
        self.rteosq = math.sqrt(self.omeosq)
        self.cosio = math.cos(self.inclo)
        self.cosio2 = self.cosio * self.cosio

        # Un-Kozai the mean motion
        ak = math.pow(XKE / el.mean_motion, X2O3)
        d1 = 0.75 * J2 * (3.0 * self.cosio2 - 1.0) / (self.rteosq * self.omeosq)
        delta = d1 / (ak * ak)
        adel = ak * (1.0 - delta * delta - delta * (1.0 / 3.0 + 134.0 * delta * delta / 81.0))
        delta = d1 / (adel * adel)
        self.no_unkozai = el.mean_motion / (1.0 + delta)

        self.ao = math.pow(XKE / self.no_unkozai, X2O3)
        self.sinio = math.sin(self.inclo)
        po = self.ao * self.omeosq
        self.con42 = 1.0 - 5.0 * self.cosio2
        self.con41 = -self.con42 - self.cosio2 - self.cosio2
        self.posq = po * po
        self.rp = self.ao * (1.0 - self.ecco)
        self.gsto = gmst(self.epoch + JD_1950)

    def sgp4init(self):
        """Initialise secular rates, drag coefficients and the deep-space terms."""
        el = self.elements
        if el.mean_motion <= 0.0:
            logger.warning(f"Satellite {el.catalog_number}: mean motion {el.mean_motion} is not positive")
            raise DecayedError(2, 0.0, f"n={el.mean_motion}")
        if not 0.0 <= el.eccentricity < 1.0:
            logger.warning(f"Satellite {el.catalog_number}: eccentricity {el.eccentricity} out of range")
            raise DecayedError(1, 0.0, f"e={el.eccentricity}")

        self._initl()

        ao = self.ao
        cosio = self.cosio
        cosio2 = self.cosio2
        sinio = self.sinio
        omeosq = self.omeosq

        if self.rp < 220.0 / EARTH_RADIUS_KM + 1.0:
            self.isimp = 1

        # Perigees below 156 km alter s and qoms2t
        sfour = SS
        qzms24 = QZMS2T
        perige = (self.rp - 1.0) * EARTH_RADIUS_KM
        if perige < 156.0:
            sfour = perige - 78.0
            if perige < 98.0:
                sfour = 20.0
            qzms24 = ((120.0 - sfour) / EARTH_RADIUS_KM) ** 4
            sfour = sfour / EARTH_RADIUS_KM + 1.0

        pinvsq = 1.0 / self.posq
        tsi = 1.0 / (ao - sfour)
        self.eta = ao * self.ecco * tsi
        etasq = self.eta * self.eta
        eeta = self.ecco * self.eta
        psisq = abs(1.0 - etasq)
        coef = qzms24 * math.pow(tsi, 4.0)
        coef1 = coef / math.pow(psisq, 3.5)

        # Drag coefficients
        cc2 = coef1 * self.no_unkozai * (
            ao * (1.0 + 1.5 * etasq + eeta * (4.0 + etasq))
            + 0.375 * J2 * tsi / psisq * self.con41 * (8.0 + 3.0 * etasq * (8.0 + etasq))
        )
        self.cc1 = self.bstar * cc2
        cc3 = 0.0
        if self.ecco > 1.0e-4:
            cc3 = -2.0 * coef * tsi * J3OJ2 * self.no_unkozai * sinio / self.ecco
        self.x1mth2 = 1.0 - cosio2
        self.cc4 = 2.0 * self.no_unkozai * coef1 * ao * omeosq * (
            self.eta * (2.0 + 0.5 * etasq)
            + self.ecco * (0.5 + 2.0 * etasq)
            - J2 * tsi / (ao * psisq) * (
                -3.0 * self.con41 * (1.0 - 2.0 * eeta + etasq * (1.5 - 0.5 * eeta))
                + 0.75 * self.x1mth2 * (2.0 * etasq - eeta * (1.0 + etasq)) * math.cos(2.0 * self.argpo)
            )
        )
        self.cc5 = 2.0 * coef1 * ao * omeosq * (1.0 + 2.75 * (etasq + eeta) + eeta * etasq)

        # Secular rates from J2 and J4
        cosio4 = cosio2 * cosio2
        temp1 = 1.5 * J2 * pinvsq * self.no_unkozai
        temp2 = 0.5 * temp1 * J2 * pinvsq
        temp3 = -0.46875 * J4 * pinvsq * pinvsq * self.no_unkozai
        self.mdot = (
            self.no_unkozai
            + 0.5 * temp1 * self.rteosq * self.con41
            + 0.0625 * temp2 * self.rteosq * (13.0 - 78.0 * cosio2 + 137.0 * cosio4)
        )
        self.argpdot = (
            -0.5 * temp1 * self.con42
            + 0.0625 * temp2 * (7.0 - 114.0 * cosio2 + 395.0 * cosio4)
            + temp3 * (3.0 - 36.0 * cosio2 + 49.0 * cosio4)
        )
        xhdot1 = -temp1 * cosio
        self.nodedot = xhdot1 + (
            0.5 * temp2 * (4.0 - 19.0 * cosio2) + 2.0 * temp3 * (3.0 - 7.0 * cosio2)
        ) * cosio
        xpidot = self.argpdot + self.nodedot

        self.omgcof = self.bstar * cc3 * math.cos(self.argpo)
        self.xmcof = 0.0
        if self.ecco > 1.0e-4:
            self.xmcof = -X2O3 * coef * self.bstar / eeta
        self.nodecf = 3.5 * omeosq * xhdot1 * self.cc1
        self.t2cof = 1.5 * self.cc1

        # Long period coefficients
        if abs(cosio + 1.0) > TEMP4:
            self.xlcof = -0.25 * J3OJ2 * sinio * (3.0 + 5.0 * cosio) / (1.0 + cosio)
        else:
            self.xlcof = -0.25 * J3OJ2 * sinio * (3.0 + 5.0 * cosio) / TEMP4
        self.aycof = -0.5 * J3OJ2 * sinio

        delmotemp = 1.0 + self.eta * math.cos(self.mo)
        self.delmo = delmotemp * delmotemp * delmotemp
        self.sinmao = math.sin(self.mo)
        self.x7thm1 = 7.0 * cosio2 - 1.0

        # Deep space check (period >= 225 minutes)
        if TWO_PI / self.no_unkozai >= DEEP_SPACE_PERIOD_MINUTES:
            self.method = "d"
            self.isimp = 1
            self.lunar_solar, aux = deep_space.dscom(
                self.epoch, self.ecco, self.argpo, 0.0, self.inclo, self.nodeo, self.no_unkozai
            )
            self.resonance_state = deep_space.dsinit(
                aux, XKE, self.argpo, self.gsto, self.mo, self.mdot, self.no_unkozai,
                self.nodeo, self.nodedot, xpidot, self.ecco, self.eccsq, self.inclo,
            )

        # Higher order drag terms
        self.d2 = self.d3 = self.d4 = 0.0
        self.t3cof = self.t4cof = self.t5cof = 0.0
        if self.isimp != 1:
            cc1sq = self.cc1 * self.cc1
            self.d2 = 4.0 * ao * tsi * cc1sq
            temp = self.d2 * tsi * self.cc1 / 3.0
            self.d3 = (17.0 * ao + sfour) * temp
            self.d4 = 0.5 * temp * ao * tsi * (221.0 * ao + 31.0 * sfour) * self.cc1
            self.t3cof = self.d2 + 2.0 * cc1sq
            self.t4cof = 0.25 * (3.0 * self.d3 + self.cc1 * (12.0 * self.d2 + 10.0 * cc1sq))
            self.t5cof = 0.2 * (
                3.0 * self.d4
                + 12.0 * self.cc1 * self.d3
                + 6.0 * self.d2 * self.d2
                + 15.0 * cc1sq * (2.0 * self.d2 + cc1sq)
            )

        logger.debug(
            f"Initialised satellite {el.catalog_number}: method={self.method}, "
            f"period={self.period_minutes:.2f} min, resonance={self.resonance}, "
            f"perigee={perige:.1f} km"
        )

        # Validate the epoch state
        self.propagate(0.0)

    def _fail(self, error):
        logger.warning(f"Satellite {self.elements.catalog_number}: {error}")
        raise error

    def solve_kepler(self, u: float, axnl: float, aynl: float, tsince: float) -> Tuple[float, float]:
        """
        Solve the modified Kepler equation for E + ω by Newton-Raphson.

        Args:
            u: Mean longitude minus node (rad)
            axnl, aynl: Long-period eccentricity vector components
            tsince: Minutes since epoch, for error reporting

        Returns:
            (sin, cos) of the converged angle

        Raises:
            NonConvergentError: The iteration cap was hit before the
                correction fell below 1e-6 rad
        """
        eo1 = u
        tem5 = 9999.9
        ktr = 1
        sineo1 = coseo1 = 0.0
        while abs(tem5) >= KEPLER_TOLERANCE and ktr <= KEPLER_MAX_ITERATIONS:
            sineo1 = math.sin(eo1)
            coseo1 = math.cos(eo1)
            tem5 = 1.0 - coseo1 * axnl - sineo1 * aynl
            tem5 = (u - aynl * coseo1 + axnl * sineo1 - eo1) / tem5
            if abs(tem5) >= 0.95:
                tem5 = 0.95 if tem5 > 0.0 else -0.95
            eo1 = eo1 + tem5
            ktr += 1

        if abs(tem5) >= KEPLER_CONVERGED:
            self._fail(NonConvergentError(tsince, f"last correction {tem5:.3e} rad"))
        return sineo1, coseo1

    def propagate(self, tsince: float) -> Tuple[np.ndarray, np.ndarray]:
        """
        Propagate the orbit to a time offset from epoch.

        Parameters
        ----------
        tsince : float
            Minutes since epoch, negative for times before it

        Returns
        -------
        tuple
            (position, velocity) as numpy arrays in km and km/s, TEME frame

        Raises
        ------
        DecayedError
            Codes 1-4 and 6: the orbit is no longer physical
        NonConvergentError
            Code 5: Kepler's equation did not converge
        """
        t = tsince

        # Secular gravity and atmospheric drag
        xmdf = self.mo + self.mdot * t
        argpdf = self.argpo + self.argpdot * t
        nodedf = self.nodeo + self.nodedot * t
        argpm = argpdf
        mm = xmdf
        t2 = t * t
        nodem = nodedf + self.nodecf * t2
        tempa = 1.0 - self.cc1 * t
        tempe = self.bstar * self.cc4 * t
        templ = self.t2cof * t2

        if self.isimp != 1:
            delomg = self.omgcof * t
            delmtemp = 1.0 + self.eta * math.cos(xmdf)
            delm = self.xmcof * (delmtemp * delmtemp * delmtemp - self.delmo)
            temp = delomg + delm
            mm = xmdf + temp
            argpm = argpdf - temp
            t3 = t2 * t
            t4 = t3 * t
            tempa = tempa - self.d2 * t2 - self.d3 * t3 - self.d4 * t4
            tempe = tempe + self.bstar * self.cc5 * (math.sin(mm) - self.sinmao)
            templ = templ + self.t3cof * t3 + t4 * (self.t4cof + t * self.t5cof)

        nm = self.no_unkozai
        em = self.ecco
        inclm = self.inclo
        if self.method == "d":
            em, argpm, inclm, mm, nodem, nm = deep_space.dspace(
                self.resonance_state, t, self.gsto, self.no_unkozai,
                self.argpo, self.argpdot, em, argpm, inclm, mm, nodem,
            )

        if nm <= 0.0:
            self._fail(DecayedError(2, t, f"n={nm:.6e}"))

        am = math.pow(XKE / nm, X2O3) * tempa * tempa
        nm = XKE / math.pow(am, 1.5)
        em = em - tempe

        if em >= 1.0 or em < -0.001:
            self._fail(DecayedError(1, t, f"e={em:.6f}"))
        if em < 1.0e-6:
            em = 1.0e-6

        mm = mm + self.no_unkozai * templ
        xlm = mm + argpm + nodem

        nodem = math.fmod(nodem, TWO_PI)
        argpm = argpm % TWO_PI
        xlm = xlm % TWO_PI
        mm = (xlm - argpm - nodem) % TWO_PI

        sinim = math.sin(inclm)
        cosim = math.cos(inclm)

        # Lunar-solar periodics
        ep = em
        xincp = inclm
        argpp = argpm
        nodep = nodem
        mp = mm
        sinip = sinim
        cosip = cosim
        aycof = self.aycof
        xlcof = self.xlcof
        con41 = self.con41
        x1mth2 = self.x1mth2
        x7thm1 = self.x7thm1

        if self.method == "d":
            ep, xincp, nodep, argpp, mp = deep_space.dpper(
                self.lunar_solar, t, ep, xincp, nodep, argpp, mp
            )
            if xincp < 0.0:
                xincp = -xincp
                nodep = nodep + math.pi
                argpp = argpp - math.pi
            if ep < 0.0 or ep > 1.0:
                self._fail(DecayedError(3, t, f"e={ep:.6f}"))

            # Long period coefficients follow the perturbed inclination
            sinip = math.sin(xincp)
            cosip = math.cos(xincp)
            aycof = -0.5 * J3OJ2 * sinip
            if abs(cosip + 1.0) > TEMP4:
                xlcof = -0.25 * J3OJ2 * sinip * (3.0 + 5.0 * cosip) / (1.0 + cosip)
            else:
                xlcof = -0.25 * J3OJ2 * sinip * (3.0 + 5.0 * cosip) / TEMP4

        # Long period periodics
        axnl = ep * math.cos(argpp)
        temp = 1.0 / (am * (1.0 - ep * ep))
        aynl = ep * math.sin(argpp) + temp * aycof
        xl = mp + argpp + nodep + temp * xlcof * axnl

        u = (xl - nodep) % TWO_PI
        sineo1, coseo1 = self.solve_kepler(u, axnl, aynl, t)

        # Short period preliminary quantities
        ecose = axnl * coseo1 + aynl * sineo1
        esine = axnl * sineo1 - aynl * coseo1
        el2 = axnl * axnl + aynl * aynl
        pl = am * (1.0 - el2)
        if pl < 0.0:
            self._fail(DecayedError(4, t, f"p={pl:.6e}"))

        rl = am * (1.0 - ecose)
        rdotl = math.sqrt(am) * esine / rl
        rvdotl = math.sqrt(pl) / rl
        betal = math.sqrt(1.0 - el2)
        temp = esine / (1.0 + betal)
        sinu = am / rl * (sineo1 - aynl - axnl * temp)
        cosu = am / rl * (coseo1 - axnl + aynl * temp)
        su = math.atan2(sinu, cosu)
        sin2u = (cosu + cosu) * sinu
        cos2u = 1.0 - 2.0 * sinu * sinu
        temp = 1.0 / pl
        temp1 = 0.5 * J2 * temp
        temp2 = temp1 * temp

        if self.method == "d":
            cosisq = cosip * cosip
            con41 = 3.0 * cosisq - 1.0
            x1mth2 = 1.0 - cosisq
            x7thm1 = 7.0 * cosisq - 1.0

        # Short period periodics
        mrt = rl * (1.0 - 1.5 * temp2 * betal * con41) + 0.5 * temp1 * x1mth2 * cos2u
        su = su - 0.25 * temp2 * x7thm1 * sin2u
        xnode = nodep + 1.5 * temp2 * cosip * sin2u
        xinc = xincp + 1.5 * temp2 * cosip * sinip * cos2u
        mvt = rdotl - nm * temp1 * x1mth2 * sin2u / XKE
        rvdot = rvdotl + nm * temp1 * (x1mth2 * cos2u + 1.5 * con41) / XKE

        if mrt < 1.0:
            self._fail(DecayedError(6, t, f"r={mrt * EARTH_RADIUS_KM:.1f} km"))

        # Orientation vectors
        sinsu = math.sin(su)
        cossu = math.cos(su)
        snod = math.sin(xnode)
        cnod = math.cos(xnode)
        sini = math.sin(xinc)
        cosi = math.cos(xinc)
        xmx = -snod * cosi
        xmy = cnod * cosi
        ux = xmx * sinsu + cnod * cossu
        uy = xmy * sinsu + snod * cossu
        uz = sini * sinsu
        vx = xmx * cossu - cnod * sinsu
        vy = xmy * cossu - snod * sinsu
        vz = sini * cossu

        self.last_mean = MeanElements(
            semi_major_axis=am,
            eccentricity=em,
            inclination=inclm,
            raan=nodem,
            arg_perigee=argpm,
            mean_anomaly=mm,
            mean_motion=nm,
            phase=(xl - nodep - argpp) % TWO_PI,
        )

        position = np.array([ux, uy, uz]) * (mrt * EARTH_RADIUS_KM)
        velocity = (mvt * np.array([ux, uy, uz]) + rvdot * np.array([vx, vy, vz])) * VKMPERSEC
        return position, velocity
