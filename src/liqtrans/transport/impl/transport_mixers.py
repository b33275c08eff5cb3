"""
Liquid mixture transport mixing rules.

Scalar rules combine per-species values into one mixture value:
- solvent                : sum_i v_i w_i + composition polynomial in (A, B)
- mole_fractions         : sum_i v_i x_i w_i + composition polynomial in (A, B)
- mass_fractions         : same as mole_fractions with mass fractions
- log_mole_fractions     : exp(sum_i ln(v_i) x_i w_i + excess terms in (H, S))
- mole_fractions_exp_t   : sum_i v_i x_i w_i + polynomial in A with exp(B T)
Matrix rules return an N x N array of pairwise coefficients:
- pairwise_interaction   : exp(E_ij / T) / D_ij
- stokes_einstein        : 6 pi r_i mu_j / (R T)

Temperature and composition are read from the thermodynamic state on every
call; nothing is cached between calls.
"""

from __future__ import annotations

import enum
import logging
import math
from typing import Any, Iterable, List, Optional, Sequence, Tuple

import numpy as np

from liqtrans.common.exceptions import MissingPropertyData, ModelError, UsageError

from .coefficients import CoefficientFamily, InteractionCoefficients
from .registry import register
from ..utils.units import R_UNIVERSAL

_log = logging.getLogger(__name__)


class TransportProperty(enum.Enum):
    VISCOSITY = "viscosity"
    ION_CONDUCTIVITY = "ion_conductivity"
    MOBILITY_RATIO = "mobility_ratio"
    SELF_DIFFUSION = "self_diffusion"
    THERMAL_CONDUCTIVITY = "thermal_conductivity"
    SPECIES_DIFFUSIVITY = "species_diffusivity"
    HYDRODYNAMIC_RADIUS = "hydrodynamic_radius"
    ELECTRICAL_CONDUCTIVITY = "electrical_conductivity"


def _as_vector(values: Iterable[float], n: int, what: str) -> np.ndarray:
    vec = np.asarray(list(values), dtype=float)
    if vec.shape != (n,):
        raise ValueError(f"{what} must have one entry per species ({n}), got {vec.shape[0]}")
    return vec


def _unpack(handles: Sequence[Any]) -> Tuple[List[float], List[float]]:
    return [h.value() for h in handles], [h.weight for h in handles]


def composition_polynomial(family: CoefficientFamily, fracs: np.ndarray) -> float:
    """sum_ij sum_k x_i x_j C_k(i,j) x_i**k over all orders of ``family``."""

    total = 0.0
    for k, mat in enumerate(family):
        total += float(np.sum(np.outer(fracs ** (k + 1), fracs) * mat))
    return total


class MixingRule:
    """Base mixing rule: holds the interaction coefficients and the state handle.

    ``thermo`` is only queried, never owned. Variants override the queries that
    make sense for them; the rest raise :class:`ModelError`.
    """

    model = "not_set"

    def __init__(self, prop: Optional[TransportProperty] = None, thermo=None):
        self.property = prop
        self.thermo = thermo
        self.coeffs: Optional[InteractionCoefficients] = None
        if thermo is not None:
            self.coeffs = InteractionCoefficients(thermo.n_species)

    def init(self, block: Optional[Iterable[Any]], thermo) -> "MixingRule":
        """Parse the ``interaction`` entries of this rule's database block."""

        self.thermo = thermo
        self.coeffs = InteractionCoefficients(thermo.n_species)
        self.coeffs.configure(block, thermo)
        _log.debug(
            "Configured %s mixing rule for %s (A:%d B:%d H:%d S:%d orders)",
            self.model,
            self.property.value if self.property else "unbound property",
            len(self.coeffs.A),
            len(self.coeffs.B),
            len(self.coeffs.H),
            len(self.coeffs.S),
        )
        return self

    def set_parameters(self, params) -> None:
        """Hook for rules that need the per-species data of the parameter bundle."""

    def mix_values(self, values: Sequence[float], weights: Optional[Sequence[float]] = None) -> float:
        raise ModelError(f"Calling {type(self).__name__}.mix_values does not make sense.")

    def mix_species(self, handles: Sequence[Any]) -> float:
        missing = [k for k, h in enumerate(handles) if h is None]
        if missing:
            raise MissingPropertyData(f"{type(self).__name__}: no species transport data for species {missing}")
        return self.mix_values(*_unpack(handles))

    def matrix(self, values: Optional[Sequence[float]] = None) -> np.ndarray:
        raise ModelError(f"{type(self).__name__} does not provide a pairwise matrix.")

    @property
    def n_species(self) -> int:
        return self.thermo.n_species

    def _fractions(self) -> np.ndarray:
        return np.asarray(self.thermo.mole_fractions(), dtype=float)

    def _weighted_fractions(self, weights: Optional[Sequence[float]]) -> np.ndarray:
        if weights is None:
            raise UsageError(f"{type(self).__name__}.mix_values: you should be specifying the species weights")
        return self._fractions() * _as_vector(weights, self.n_species, "weights")

    def _correction(self, fracs: np.ndarray) -> float:
        T = self.thermo.temperature
        return composition_polynomial(self.coeffs.A, fracs) + T * composition_polynomial(self.coeffs.B, fracs)


@register("solvent")
class SolventMixing(MixingRule):
    """Weighted sum of species values with a composition correction.

    The weights pick the solvent (1.0) and drop the solutes (0.0); the
    correction uses the plain mole fractions, not the weighted ones.
    """

    model = "solvent"

    def mix_values(self, values, weights=None):
        if weights is None:
            raise UsageError("SolventMixing.mix_values: you should be specifying the species weights")
        n = self.n_species
        v = _as_vector(values, n, "values")
        w = _as_vector(weights, n, "weights")
        return float(np.dot(v, w)) + self._correction(self._fractions())


@register("mole_fractions")
class MoleFractionsMixing(MixingRule):
    model = "mole_fractions"

    def mix_values(self, values, weights=None):
        fracs = self._weighted_fractions(weights)
        v = _as_vector(values, self.n_species, "values")
        return float(np.dot(v, fracs)) + self._correction(fracs)


@register("mass_fractions")
class MassFractionsMixing(MoleFractionsMixing):
    model = "mass_fractions"

    def _fractions(self) -> np.ndarray:
        return np.asarray(self.thermo.mass_fractions(), dtype=float)


@register("log_mole_fractions")
class LogMoleFractionsMixing(MixingRule):
    """Arrhenius-like mixing; H and S act as excess enthalpy/entropy terms."""

    model = "log_mole_fractions"

    def mix_values(self, values, weights=None):
        if weights is None:
            raise UsageError(
                "LogMoleFractionsMixing.mix_values: you probably should have species weights "
                "to convert ion mole fractions to molecular mole fractions"
            )
        fracs = self._weighted_fractions(weights)
        v = _as_vector(values, self.n_species, "values")
        T = self.thermo.temperature
        ln_value = float(np.dot(np.log(v), fracs))
        ln_value += composition_polynomial(self.coeffs.H, fracs) / T
        ln_value -= composition_polynomial(self.coeffs.S, fracs)
        return math.exp(ln_value)


@register("mole_fractions_exp_t")
class MoleFractionsExpTMixing(MixingRule):
    model = "mole_fractions_exp_t"

    def mix_values(self, values, weights=None):
        fracs = self._weighted_fractions(weights)
        v = _as_vector(values, self.n_species, "values")
        T = self.thermo.temperature
        value = float(np.dot(v, fracs))
        outer = np.outer(fracs, fracs)
        for k, a_k in enumerate(self.coeffs.A):
            # B orders beyond those configured read as zero
            b_k = self.coeffs.B[k] if k < len(self.coeffs.B) else np.zeros_like(a_k)
            value += float(np.sum(outer * (fracs ** k)[:, None] * a_k * np.exp(b_k * T)))
        return value


@register("pairwise_interaction")
class PairwiseInteraction(MixingRule):
    """Pairwise coefficients exp(E_ij/T)/D_ij; diagonal from species diffusivities."""

    model = "pairwise_interaction"

    def __init__(self, prop=None, thermo=None):
        super().__init__(prop, thermo)
        self.diagonals: List[Any] = []

    def set_parameters(self, params) -> None:
        self.diagonals = [rec.species_diffusivity for rec in params.species_data]

    def mix_values(self, values, weights=None):
        raise ModelError("Calling PairwiseInteraction.mix_values does not make sense.")

    def mix_species(self, handles):
        raise ModelError("Calling PairwiseInteraction.mix_species does not make sense.")

    def matrix(self, values=None) -> np.ndarray:
        n = self.n_species
        T = self.thermo.temperature
        D = self.coeffs.D[0]
        E = self.coeffs.E[0]
        mat = np.zeros((n, n))
        for i in range(n):
            for j in range(i):
                if D[i, j] == 0.0:
                    raise ModelError(f"No Dij interaction configured for species pair ({i}, {j})")
                mat[i, j] = mat[j, i] = math.exp(E[i, j] / T) / D[i, j]
        for i, handle in enumerate(self.diagonals):
            if mat[i, i] == 0.0 and handle is not None:
                mat[i, i] = 1.0 / handle.value()
        return mat


@register("stokes_einstein")
class StokesEinstein(MixingRule):
    """Hydrodynamic friction 6 pi r_i mu_j / (R T); row species gives the radius."""

    model = "stokes_einstein"

    def __init__(self, prop=None, thermo=None):
        super().__init__(prop, thermo)
        self.viscosity: List[Any] = []
        self.hydro_radius: List[Any] = []

    def set_parameters(self, params) -> None:
        self.viscosity = [rec.viscosity for rec in params.species_data]
        self.hydro_radius = [rec.hydrodynamic_radius for rec in params.species_data]

    def mix_values(self, values, weights=None):
        raise ModelError("Calling StokesEinstein.mix_values does not make sense.")

    def mix_species(self, handles):
        raise ModelError("Calling StokesEinstein.mix_species does not make sense.")

    def matrix(self, values=None) -> np.ndarray:
        n = self.n_species
        if len(self.viscosity) != n or len(self.hydro_radius) != n:
            raise MissingPropertyData("StokesEinstein needs viscosity and hydrodynamic radius for every species")
        for k, (mu, r) in enumerate(zip(self.viscosity, self.hydro_radius)):
            if mu is None or r is None:
                raise MissingPropertyData(
                    f"StokesEinstein needs viscosity and hydrodynamic radius data for species {k}"
                )
        T = self.thermo.temperature
        visc = np.array([h.value() for h in self.viscosity])
        radius = np.array([h.value() for h in self.hydro_radius])
        return 6.0 * math.pi * np.outer(radius, visc) / (R_UNIVERSAL * T)
