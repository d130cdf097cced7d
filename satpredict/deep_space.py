"""
Deep-Space (SDP4) Perturbations

Lunar-solar gravitational perturbations and geopotential resonance terms for
orbits with a period of 225 minutes or more. Used by SGP4Propagator when the
deep-space branch is selected.

- dscom: lunar and solar coefficients at epoch
- dpper: lunar-solar long-period periodics
- dsinit: secular rates and resonance initialisation (12 h / 24 h orbits)
- dspace: secular update and resonance integration at a given time

The resonance integrator keeps its state (atime, xli, xni) in a
ResonanceState between calls so that successive propagations continue the
integration instead of restarting it at epoch.

References:
    Vallado, D. A., Crawford, P., Hujsak, R., & Kelso, T. S. (2006).
    Revisiting Spacetrack Report #3. AIAA 2006-6753.
    Hoots, F. R., & Roehrich, R. L. (1980). Spacetrack Report No. 3.
"""

import math
from dataclasses import dataclass
from typing import Dict, Tuple

from config import TWO_PI

# Solar and lunar mean motions (rad/min) and eccentricities
ZNS = 1.19459e-5
ZES = 0.01675
ZNL = 1.5835218e-4
ZEL = 0.05490

# Earth rotation rate in rad/min
RPTIM = 4.37526908801129966e-3

# Resonance integrator step (minutes)
STEP = 720.0
STEP2 = 259200.0

# Sin/cos of the solar inclination and perigee
_C1SS = 2.9864797e-6
_C1L = 4.7968065e-7
_ZSINIS = 0.39785416
_ZCOSIS = 0.91744867
_ZCOSGS = 0.1945905
_ZSINGS = -0.98088458

# Resonance coefficients
_Q22 = 1.7891679e-6
_Q31 = 2.1460748e-6
_Q33 = 2.2123015e-7
_ROOT22 = 1.7891679e-6
_ROOT44 = 7.3636953e-9
_ROOT54 = 2.1765803e-9
_ROOT32 = 3.7393792e-7
_ROOT52 = 1.1428639e-7

_FASX2 = 0.13130908
_FASX4 = 2.8843198
_FASX6 = 0.37448087
_G22 = 5.7686396
_G32 = 0.95240898
_G44 = 1.8014998
_G52 = 1.0508330
_G54 = 4.4108898

# Inclinations closer than this to 0 or 180 degrees drop the node terms
_SMALL_INCLINATION = 5.2359877e-2


@dataclass
class LunarSolarTerms:
    """Coefficients of the lunar-solar periodics, fixed at epoch."""

    e3: float = 0.0
    ee2: float = 0.0
    peo: float = 0.0
    pgho: float = 0.0
    pho: float = 0.0
    pinco: float = 0.0
    plo: float = 0.0
    se2: float = 0.0
    se3: float = 0.0
    sgh2: float = 0.0
    sgh3: float = 0.0
    sgh4: float = 0.0
    sh2: float = 0.0
    sh3: float = 0.0
    si2: float = 0.0
    si3: float = 0.0
    sl2: float = 0.0
    sl3: float = 0.0
    sl4: float = 0.0
    xgh2: float = 0.0
    xgh3: float = 0.0
    xgh4: float = 0.0
    xh2: float = 0.0
    xh3: float = 0.0
    xi2: float = 0.0
    xi3: float = 0.0
    xl2: float = 0.0
    xl3: float = 0.0
    xl4: float = 0.0
    zmol: float = 0.0
    zmos: float = 0.0


@dataclass
class ResonanceState:
    """
    Deep-space secular rates, resonance coefficients and integrator state.

    irez is 0 without resonance, 1 for synchronous (24 hour) and 2 for
    half-day (12 hour) orbits. atime, xli and xni are the integrator
    accumulators carried from one propagation to the next.
    """

    irez: int = 0
    dedt: float = 0.0
    didt: float = 0.0
    dmdt: float = 0.0
    dnodt: float = 0.0
    domdt: float = 0.0
    d2201: float = 0.0
    d2211: float = 0.0
    d3210: float = 0.0
    d3222: float = 0.0
    d4410: float = 0.0
    d4422: float = 0.0
    d5220: float = 0.0
    d5232: float = 0.0
    d5421: float = 0.0
    d5433: float = 0.0
    del1: float = 0.0
    del2: float = 0.0
    del3: float = 0.0
    xfact: float = 0.0
    xlamo: float = 0.0
    atime: float = 0.0
    xli: float = 0.0
    xni: float = 0.0

    def reset(self, no: float) -> None:
        """Restart the integrator at epoch."""
        self.atime = 0.0
        self.xni = no
        self.xli = self.xlamo


def dscom(epoch: float, ep: float, argpp: float, tc: float, inclp: float,
          nodep: float, np: float) -> Tuple[LunarSolarTerms, Dict[str, float]]:
    """
    Compute lunar and solar coefficients at epoch.

    Parameters
    ----------
    epoch : float
        Epoch in days since 1950 January 0.0
    ep, argpp, inclp, nodep : float
        Eccentricity, argument of perigee, inclination and node (rad)
    tc : float
        Minutes since epoch (0 at initialisation)
    np : float
        Un-Kozai'd mean motion (rad/min)

    Returns
    -------
    tuple
        LunarSolarTerms and a dict of the auxiliary solar (ss*, sz*) and
        lunar (s*, z*) quantities consumed by dsinit
    """
    snodm = math.sin(nodep)
    cnodm = math.cos(nodep)
    sinomm = math.sin(argpp)
    cosomm = math.cos(argpp)
    sinim = math.sin(inclp)
    cosim = math.cos(inclp)
    emsq = ep * ep
    betasq = 1.0 - emsq
    rtemsq = math.sqrt(betasq)

    day = epoch + 18261.5 + tc / 1440.0
    xnodce = (4.5236020 - 9.2422029e-4 * day) % TWO_PI
    stem = math.sin(xnodce)
    ctem = math.cos(xnodce)
    zcosil = 0.91375164 - 0.03568096 * ctem
    zsinil = math.sqrt(1.0 - zcosil * zcosil)
    zsinhl = 0.089683511 * stem / zsinil
    zcoshl = math.sqrt(1.0 - zsinhl * zsinhl)
    gam = 5.8351514 + 0.0019443680 * day
    zx = 0.39785416 * stem / zsinil
    zy = zcoshl * ctem + 0.91744867 * zsinhl * stem
    zx = math.atan2(zx, zy)
    zx = gam + zx - xnodce
    zcosgl = math.cos(zx)
    zsingl = math.sin(zx)

    # Solar pass first, then lunar
    zcosg, zsing = _ZCOSGS, _ZSINGS
    zcosi, zsini = _ZCOSIS, _ZSINIS
    zcosh, zsinh = cnodm, snodm
    cc = _C1SS
    xnoi = 1.0 / np

    passes = []
    for body in ("sun", "moon"):
        a1 = zcosg * zcosh + zsing * zcosi * zsinh
        a3 = -zsing * zcosh + zcosg * zcosi * zsinh
        a7 = -zcosg * zsinh + zsing * zcosi * zcosh
        a8 = zsing * zsini
        a9 = zsing * zsinh + zcosg * zcosi * zcosh
        a10 = zcosg * zsini
        a2 = cosim * a7 + sinim * a8
        a4 = cosim * a9 + sinim * a10
        a5 = -sinim * a7 + cosim * a8
        a6 = -sinim * a9 + cosim * a10

        x1 = a1 * cosomm + a2 * sinomm
        x2 = a3 * cosomm + a4 * sinomm
        x3 = -a1 * sinomm + a2 * cosomm
        x4 = -a3 * sinomm + a4 * cosomm
        x5 = a5 * sinomm
        x6 = a6 * sinomm
        x7 = a5 * cosomm
        x8 = a6 * cosomm

        z31 = 12.0 * x1 * x1 - 3.0 * x3 * x3
        z32 = 24.0 * x1 * x2 - 6.0 * x3 * x4
        z33 = 12.0 * x2 * x2 - 3.0 * x4 * x4
        z1 = 3.0 * (a1 * a1 + a2 * a2) + z31 * emsq
        z2 = 6.0 * (a1 * a3 + a2 * a4) + z32 * emsq
        z3 = 3.0 * (a3 * a3 + a4 * a4) + z33 * emsq
        z11 = -6.0 * a1 * a5 + emsq * (-24.0 * x1 * x7 - 6.0 * x3 * x5)
        z12 = (-6.0 * (a1 * a6 + a3 * a5)
               + emsq * (-24.0 * (x2 * x7 + x1 * x8) - 6.0 * (x3 * x6 + x4 * x5)))
        z13 = -6.0 * a3 * a6 + emsq * (-24.0 * x2 * x8 - 6.0 * x4 * x6)
        z21 = 6.0 * a2 * a5 + emsq * (24.0 * x1 * x5 - 6.0 * x3 * x7)
        z22 = (6.0 * (a4 * a5 + a2 * a6)
               + emsq * (24.0 * (x2 * x5 + x1 * x6) - 6.0 * (x4 * x7 + x3 * x8)))
        z23 = 6.0 * a4 * a6 + emsq * (24.0 * x2 * x6 - 6.0 * x4 * x8)
        z1 = z1 + z1 + betasq * z31
        z2 = z2 + z2 + betasq * z32
        z3 = z3 + z3 + betasq * z33
        s3 = cc * xnoi
        s2 = -0.5 * s3 / rtemsq
        s4 = s3 * rtemsq
        s1 = -15.0 * ep * s4
        s5 = x1 * x3 + x2 * x4
        s6 = x2 * x3 + x1 * x4
        s7 = x2 * x4 - x1 * x3

        passes.append({
            "s1": s1, "s2": s2, "s3": s3, "s4": s4, "s5": s5, "s6": s6, "s7": s7,
            "z1": z1, "z2": z2, "z3": z3,
            "z11": z11, "z12": z12, "z13": z13,
            "z21": z21, "z22": z22, "z23": z23,
            "z31": z31, "z32": z32, "z33": z33,
        })

        if body == "sun":
            zcosg, zsing = zcosgl, zsingl
            zcosi, zsini = zcosil, zsinil
            zcosh = zcoshl * cnodm + zsinhl * snodm
            zsinh = snodm * zcoshl - cnodm * zsinhl
            cc = _C1L

    sun, moon = passes

    terms = LunarSolarTerms(
        zmol=(4.7199672 + 0.22997150 * day - gam) % TWO_PI,
        zmos=(6.2565837 + 0.017201977 * day) % TWO_PI,
        # Solar terms
        se2=2.0 * sun["s1"] * sun["s6"],
        se3=2.0 * sun["s1"] * sun["s7"],
        si2=2.0 * sun["s2"] * sun["z12"],
        si3=2.0 * sun["s2"] * (sun["z13"] - sun["z11"]),
        sl2=-2.0 * sun["s3"] * sun["z2"],
        sl3=-2.0 * sun["s3"] * (sun["z3"] - sun["z1"]),
        sl4=-2.0 * sun["s3"] * (-21.0 - 9.0 * emsq) * ZES,
        sgh2=2.0 * sun["s4"] * sun["z32"],
        sgh3=2.0 * sun["s4"] * (sun["z33"] - sun["z31"]),
        sgh4=-18.0 * sun["s4"] * ZES,
        sh2=-2.0 * sun["s2"] * sun["z22"],
        sh3=-2.0 * sun["s2"] * (sun["z23"] - sun["z21"]),
        # Lunar terms
        ee2=2.0 * moon["s1"] * moon["s6"],
        e3=2.0 * moon["s1"] * moon["s7"],
        xi2=2.0 * moon["s2"] * moon["z12"],
        xi3=2.0 * moon["s2"] * (moon["z13"] - moon["z11"]),
        xl2=-2.0 * moon["s3"] * moon["z2"],
        xl3=-2.0 * moon["s3"] * (moon["z3"] - moon["z1"]),
        xl4=-2.0 * moon["s3"] * (-21.0 - 9.0 * emsq) * ZEL,
        xgh2=2.0 * moon["s4"] * moon["z32"],
        xgh3=2.0 * moon["s4"] * (moon["z33"] - moon["z31"]),
        xgh4=-18.0 * moon["s4"] * ZEL,
        xh2=-2.0 * moon["s2"] * moon["z22"],
        xh3=-2.0 * moon["s2"] * (moon["z23"] - moon["z21"]),
    )

    aux = {"sinim": sinim, "cosim": cosim, "emsq": emsq}
    aux.update({"s" + key: value for key, value in sun.items()})
    aux.update(moon)
    return terms, aux


def dpper(terms: LunarSolarTerms, t: float, ep: float, inclp: float,
          nodep: float, argpp: float, mp: float) -> Tuple[float, float, float, float, float]:
    """
    Apply lunar-solar long-period periodics to the mean elements.

    Uses the Lyddane modification below 0.2 rad of perturbed inclination.

    Returns
    -------
    tuple
        (ep, inclp, nodep, argpp, mp) with periodics applied
    """
    # Solar
    zm = terms.zmos + ZNS * t
    zf = zm + 2.0 * ZES * math.sin(zm)
    sinzf = math.sin(zf)
    f2 = 0.5 * sinzf * sinzf - 0.25
    f3 = -0.5 * sinzf * math.cos(zf)
    ses = terms.se2 * f2 + terms.se3 * f3
    sis = terms.si2 * f2 + terms.si3 * f3
    sls = terms.sl2 * f2 + terms.sl3 * f3 + terms.sl4 * sinzf
    sghs = terms.sgh2 * f2 + terms.sgh3 * f3 + terms.sgh4 * sinzf
    shs = terms.sh2 * f2 + terms.sh3 * f3

    # Lunar
    zm = terms.zmol + ZNL * t
    zf = zm + 2.0 * ZEL * math.sin(zm)
    sinzf = math.sin(zf)
    f2 = 0.5 * sinzf * sinzf - 0.25
    f3 = -0.5 * sinzf * math.cos(zf)
    sel = terms.ee2 * f2 + terms.e3 * f3
    sil = terms.xi2 * f2 + terms.xi3 * f3
    sll = terms.xl2 * f2 + terms.xl3 * f3 + terms.xl4 * sinzf
    sghl = terms.xgh2 * f2 + terms.xgh3 * f3 + terms.xgh4 * sinzf
    shll = terms.xh2 * f2 + terms.xh3 * f3

    pe = ses + sel - terms.peo
    pinc = sis + sil - terms.pinco
    pl = sls + sll - terms.plo
    pgh = sghs + sghl - terms.pgho
    ph = shs + shll - terms.pho

    inclp = inclp + pinc
    ep = ep + pe
    sinip = math.sin(inclp)
    cosip = math.cos(inclp)

    if inclp >= 0.2:
        ph = ph / sinip
        pgh = pgh - cosip * ph
        argpp = argpp + pgh
        nodep = nodep + ph
        mp = mp + pl
    else:
        # Lyddane modification
        sinop = math.sin(nodep)
        cosop = math.cos(nodep)
        alfdp = sinip * sinop
        betdp = sinip * cosop
        dalf = ph * cosop + pinc * cosip * sinop
        dbet = -ph * sinop + pinc * cosip * cosop
        alfdp = alfdp + dalf
        betdp = betdp + dbet
        nodep = math.fmod(nodep, TWO_PI)
        xls = mp + argpp + cosip * nodep
        dls = pl + pgh - pinc * nodep * sinip
        xls = xls + dls
        xnoh = nodep
        nodep = math.atan2(alfdp, betdp)
        if abs(xnoh - nodep) > math.pi:
            if nodep < xnoh:
                nodep = nodep + TWO_PI
            else:
                nodep = nodep - TWO_PI
        mp = mp + pl
        argpp = xls - mp - cosip * nodep

    return ep, inclp, nodep, argpp, mp


def dsinit(aux: Dict[str, float], xke: float, argpo: float, gsto: float,
           mo: float, mdot: float, no: float, nodeo: float, nodedot: float,
           xpidot: float, ecco: float, eccsq: float, inclo: float) -> ResonanceState:
    """
    Initialise deep-space secular rates and resonance terms.

    Parameters
    ----------
    aux : dict
        Auxiliary quantities returned by dscom
    xke : float
        Gravity constant
    argpo, mo, nodeo, inclo : float
        Epoch argument of perigee, mean anomaly, node and inclination (rad)
    gsto : float
        Greenwich sidereal angle at epoch (rad)
    mdot, nodedot, xpidot : float
        Near-Earth secular rates (rad/min)
    no : float
        Un-Kozai'd mean motion (rad/min)
    ecco, eccsq : float
        Epoch eccentricity and its square

    Returns
    -------
    ResonanceState
    """
    state = ResonanceState()
    sinim = aux["sinim"]
    cosim = aux["cosim"]
    emsq = aux["emsq"]
    nm = no
    em = ecco

    if 0.0034906585 < nm < 0.0052359877:
        state.irez = 1
    if 8.26e-3 <= nm <= 9.24e-3 and em >= 0.5:
        state.irez = 2

    near_equatorial = inclo < _SMALL_INCLINATION or inclo > math.pi - _SMALL_INCLINATION

    # Solar terms
    ses = aux["ss1"] * ZNS * aux["ss5"]
    sis = aux["ss2"] * ZNS * (aux["sz11"] + aux["sz13"])
    sls = -ZNS * aux["ss3"] * (aux["sz1"] + aux["sz3"] - 14.0 - 6.0 * emsq)
    sghs = aux["ss4"] * ZNS * (aux["sz31"] + aux["sz33"] - 6.0)
    shs = -ZNS * aux["ss2"] * (aux["sz21"] + aux["sz23"])
    if near_equatorial:
        shs = 0.0
    if sinim != 0.0:
        shs = shs / sinim
    sgs = sghs - cosim * shs

    # Lunar terms
    state.dedt = ses + aux["s1"] * ZNL * aux["s5"]
    state.didt = sis + aux["s2"] * ZNL * (aux["z11"] + aux["z13"])
    state.dmdt = sls - ZNL * aux["s3"] * (aux["z1"] + aux["z3"] - 14.0 - 6.0 * emsq)
    sghl = aux["s4"] * ZNL * (aux["z31"] + aux["z33"] - 6.0)
    shll = -ZNL * aux["s2"] * (aux["z21"] + aux["z23"])
    if near_equatorial:
        shll = 0.0
    state.domdt = sgs + sghl
    state.dnodt = shs
    if sinim != 0.0:
        state.domdt = state.domdt - cosim / sinim * shll
        state.dnodt = state.dnodt + shll / sinim

    if state.irez == 0:
        return state

    theta = gsto % TWO_PI
    aonv = math.pow(nm / xke, 2.0 / 3.0)

    if state.irez == 2:
        # Geopotential resonance for 12 hour orbits, evaluated at epoch eccentricity
        cosisq = cosim * cosim
        em = ecco
        emsq = eccsq
        eoc = em * emsq
        g201 = -0.306 - (em - 0.64) * 0.440

        if em <= 0.65:
            g211 = 3.616 - 13.2470 * em + 16.2900 * emsq
            g310 = -19.302 + 117.3900 * em - 228.4190 * emsq + 156.5910 * eoc
            g322 = -18.9068 + 109.7927 * em - 214.6334 * emsq + 146.5816 * eoc
            g410 = -41.122 + 242.6940 * em - 471.0940 * emsq + 313.9530 * eoc
            g422 = -146.407 + 841.8800 * em - 1629.014 * emsq + 1083.4350 * eoc
            g520 = -532.114 + 3017.977 * em - 5740.032 * emsq + 3708.2760 * eoc
        else:
            g211 = -72.099 + 331.819 * em - 508.738 * emsq + 266.724 * eoc
            g310 = -346.844 + 1582.851 * em - 2415.925 * emsq + 1246.113 * eoc
            g322 = -342.585 + 1554.908 * em - 2366.899 * emsq + 1215.972 * eoc
            g410 = -1052.797 + 4758.686 * em - 7193.992 * emsq + 3651.957 * eoc
            g422 = -3581.690 + 16178.110 * em - 24462.770 * emsq + 12422.520 * eoc
            if em > 0.715:
                g520 = -5149.66 + 29936.92 * em - 54087.36 * emsq + 31324.56 * eoc
            else:
                g520 = 1464.74 - 4664.75 * em + 3763.64 * emsq

        if em < 0.7:
            g533 = -919.22770 + 4988.6100 * em - 9064.7700 * emsq + 5542.21 * eoc
            g521 = -822.71072 + 4568.6173 * em - 8491.4146 * emsq + 5337.524 * eoc
            g532 = -853.66600 + 4690.2500 * em - 8624.7700 * emsq + 5341.4 * eoc
        else:
            g533 = -37995.780 + 161616.52 * em - 229838.20 * emsq + 109377.94 * eoc
            g521 = -51752.104 + 218913.95 * em - 309468.16 * emsq + 146349.42 * eoc
            g532 = -40023.880 + 170470.89 * em - 242699.48 * emsq + 115605.82 * eoc

        sini2 = sinim * sinim
        f220 = 0.75 * (1.0 + 2.0 * cosim + cosisq)
        f221 = 1.5 * sini2
        f321 = 1.875 * sinim * (1.0 - 2.0 * cosim - 3.0 * cosisq)
        f322 = -1.875 * sinim * (1.0 + 2.0 * cosim - 3.0 * cosisq)
        f441 = 35.0 * sini2 * f220
        f442 = 39.3750 * sini2 * sini2
        f522 = 9.84375 * sinim * (
            sini2 * (1.0 - 2.0 * cosim - 5.0 * cosisq)
            + 0.33333333 * (-2.0 + 4.0 * cosim + 6.0 * cosisq)
        )
        f523 = sinim * (
            4.92187512 * sini2 * (-2.0 - 4.0 * cosim + 10.0 * cosisq)
            + 6.56250012 * (1.0 + 2.0 * cosim - 3.0 * cosisq)
        )
        f542 = 29.53125 * sinim * (
            2.0 - 8.0 * cosim + cosisq * (-12.0 + 8.0 * cosim + 10.0 * cosisq)
        )
        f543 = 29.53125 * sinim * (
            -2.0 - 8.0 * cosim + cosisq * (12.0 + 8.0 * cosim - 10.0 * cosisq)
        )

        xno2 = nm * nm
        ainv2 = aonv * aonv
        temp1 = 3.0 * xno2 * ainv2
        temp = temp1 * _ROOT22
        state.d2201 = temp * f220 * g201
        state.d2211 = temp * f221 * g211
        temp1 = temp1 * aonv
        temp = temp1 * _ROOT32
        state.d3210 = temp * f321 * g310
        state.d3222 = temp * f322 * g322
        temp1 = temp1 * aonv
        temp = 2.0 * temp1 * _ROOT44
        state.d4410 = temp * f441 * g410
        state.d4422 = temp * f442 * g422
        temp1 = temp1 * aonv
        temp = temp1 * _ROOT52
        state.d5220 = temp * f522 * g520
        state.d5232 = temp * f523 * g532
        temp = 2.0 * temp1 * _ROOT54
        state.d5421 = temp * f542 * g521
        state.d5433 = temp * f543 * g533
        state.xlamo = (mo + nodeo + nodeo - theta - theta) % TWO_PI
        state.xfact = mdot + state.dmdt + 2.0 * (nodedot + state.dnodt - RPTIM) - no

    else:
        # Synchronous resonance terms
        g200 = 1.0 + emsq * (-2.5 + 0.8125 * emsq)
        g310 = 1.0 + 2.0 * emsq
        g300 = 1.0 + emsq * (-6.0 + 6.60937 * emsq)
        f220 = 0.75 * (1.0 + cosim) * (1.0 + cosim)
        f311 = 0.9375 * sinim * sinim * (1.0 + 3.0 * cosim) - 0.75 * (1.0 + cosim)
        f330 = 1.0 + cosim
        f330 = 1.875 * f330 * f330 * f330
        del1 = 3.0 * nm * nm * aonv * aonv
        state.del2 = 2.0 * del1 * f220 * g200 * _Q22
        state.del3 = 3.0 * del1 * f330 * g300 * _Q33 * aonv
        state.del1 = del1 * f311 * g310 * _Q31 * aonv
        state.xlamo = (mo + nodeo + argpo - theta) % TWO_PI
        state.xfact = mdot + xpidot - RPTIM + state.dmdt + state.domdt + state.dnodt - no

    state.reset(no)
    return state


def _resonance_rates(state: ResonanceState, argpo: float, argpdot: float) -> Tuple[float, float, float]:
    """Return (xldot, xndt, xnddt) at the integrator's current point."""
    xli = state.xli
    if state.irez != 2:
        xndt = (state.del1 * math.sin(xli - _FASX2)
                + state.del2 * math.sin(2.0 * (xli - _FASX4))
                + state.del3 * math.sin(3.0 * (xli - _FASX6)))
        xldot = state.xni + state.xfact
        xnddt = (state.del1 * math.cos(xli - _FASX2)
                 + 2.0 * state.del2 * math.cos(2.0 * (xli - _FASX4))
                 + 3.0 * state.del3 * math.cos(3.0 * (xli - _FASX6)))
        return xldot, xndt, xnddt * xldot

    xomi = argpo + argpdot * state.atime
    x2omi = xomi + xomi
    x2li = xli + xli
    xndt = (state.d2201 * math.sin(x2omi + xli - _G22)
            + state.d2211 * math.sin(xli - _G22)
            + state.d3210 * math.sin(xomi + xli - _G32)
            + state.d3222 * math.sin(-xomi + xli - _G32)
            + state.d4410 * math.sin(x2omi + x2li - _G44)
            + state.d4422 * math.sin(x2li - _G44)
            + state.d5220 * math.sin(xomi + xli - _G52)
            + state.d5232 * math.sin(-xomi + xli - _G52)
            + state.d5421 * math.sin(xomi + x2li - _G54)
            + state.d5433 * math.sin(-xomi + x2li - _G54))
    xldot = state.xni + state.xfact
    xnddt = (state.d2201 * math.cos(x2omi + xli - _G22)
             + state.d2211 * math.cos(xli - _G22)
             + state.d3210 * math.cos(xomi + xli - _G32)
             + state.d3222 * math.cos(-xomi + xli - _G32)
             + state.d5220 * math.cos(xomi + xli - _G52)
             + state.d5232 * math.cos(-xomi + xli - _G52)
             + 2.0 * (state.d4410 * math.cos(x2omi + x2li - _G44)
                      + state.d4422 * math.cos(x2li - _G44)
                      + state.d5421 * math.cos(xomi + x2li - _G54)
                      + state.d5433 * math.cos(-xomi + x2li - _G54)))
    return xldot, xndt, xnddt * xldot


def dspace(state: ResonanceState, t: float, gsto: float, no: float,
           argpo: float, argpdot: float, em: float, argpm: float,
           inclm: float, mm: float, nodem: float) -> Tuple[float, float, float, float, float, float]:
    """
    Apply deep-space secular effects and integrate the resonance terms.

    The integrator advances in 720-minute steps from its last point; it is
    restarted at epoch when t changes sign or moves back towards epoch.
    state.atime, state.xli and state.xni are updated in place.

    Returns
    -------
    tuple
        (em, argpm, inclm, mm, nodem, nm)
    """
    theta = (gsto + t * RPTIM) % TWO_PI
    em = em + state.dedt * t
    inclm = inclm + state.didt * t
    argpm = argpm + state.domdt * t
    nodem = nodem + state.dnodt * t
    mm = mm + state.dmdt * t
    nm = no

    if state.irez == 0:
        return em, argpm, inclm, mm, nodem, nm

    if state.atime == 0.0 or t * state.atime <= 0.0 or abs(t) < abs(state.atime):
        state.reset(no)

    delt = STEP if t > 0.0 else -STEP

    while True:
        xldot, xndt, xnddt = _resonance_rates(state, argpo, argpdot)
        if abs(t - state.atime) < STEP:
            ft = t - state.atime
            break
        state.xli = state.xli + xldot * delt + xndt * STEP2
        state.xni = state.xni + xndt * delt + xnddt * STEP2
        state.atime = state.atime + delt

    nm = state.xni + xndt * ft + xnddt * ft * ft * 0.5
    xl = state.xli + xldot * ft + xndt * ft * ft * 0.5
    if state.irez != 1:
        mm = xl - 2.0 * nodem + 2.0 * theta
    else:
        mm = xl - nodem - argpm + theta

    return em, argpm, inclm, mm, nodem, nm
