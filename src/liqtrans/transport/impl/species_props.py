"""
Per-species liquid transport property evaluators.

Each evaluator is bound to one species of a thermodynamic state and reads the
temperature from it on every call:
  constant : value
  arrhenius: A * T**n * exp(-E / (R T))
  coeffs   : sum_k c_k T**k
  exp_t    : exp(sum_k c_k T**k)
``weight`` is the species mixing weight used by the mixing rules.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, List, Mapping

from liqtrans.common.exceptions import ConfigurationError

from .coefficients import read_coefficients
from .registry import build_species_property, register_species_property
from ..utils.units import R_UNIVERSAL, convert


@dataclass
class SpeciesTransportProperty:
    thermo: Any
    species_index: int
    weight: float = 1.0

    def value(self) -> float:  # pragma: no cover - overridden
        raise NotImplementedError


@dataclass
class ConstantProperty(SpeciesTransportProperty):
    constant: float = 0.0

    def value(self) -> float:
        return self.constant


@dataclass
class ArrheniusProperty(SpeciesTransportProperty):
    A: float = 0.0
    n: float = 0.0
    E_over_R: float = 0.0

    def value(self) -> float:
        T = self.thermo.temperature
        return self.A * T ** self.n * math.exp(-self.E_over_R / T)


@dataclass
class PolyProperty(SpeciesTransportProperty):
    coeffs: List[float] = field(default_factory=list)

    def value(self) -> float:
        T = self.thermo.temperature
        return sum(c * T ** k for k, c in enumerate(self.coeffs))


@dataclass
class ExpTProperty(PolyProperty):
    def value(self) -> float:
        return math.exp(super().value())


def _weight(spec: Mapping[str, Any]) -> float:
    return float(spec.get("weight", 1.0))


@register_species_property("constant")
def _build_constant(spec: Mapping[str, Any], thermo, k: int) -> ConstantProperty:
    if "value" not in spec:
        raise ConfigurationError("constant species transport model needs a 'value'")
    value = convert(spec["value"], spec.get("units"), "toSI")
    return ConstantProperty(thermo, k, _weight(spec), constant=value)


@register_species_property("arrhenius")
def _build_arrhenius(spec: Mapping[str, Any], thermo, k: int) -> ArrheniusProperty:
    missing = [key for key in ("A", "n", "E") if key not in spec]
    if missing:
        raise ConfigurationError(f"arrhenius species transport model is missing {missing}")
    A = convert(spec["A"], spec.get("units"), "toSI")
    (E,) = read_coefficients(spec["E"], "actEnergy")
    return ArrheniusProperty(thermo, k, _weight(spec), A=A, n=float(spec["n"]), E_over_R=E / R_UNIVERSAL)


@register_species_property("coeffs")
def _build_poly(spec: Mapping[str, Any], thermo, k: int) -> PolyProperty:
    units = spec.get("units")
    coeffs = [convert(c, units, "toSI") for c in spec.get("coeffs", ())]
    if not coeffs:
        raise ConfigurationError("coeffs species transport model needs a non-empty 'coeffs' list")
    return PolyProperty(thermo, k, _weight(spec), coeffs=coeffs)


@register_species_property("exp_t")
def _build_exp_t(spec: Mapping[str, Any], thermo, k: int) -> ExpTProperty:
    coeffs = [float(c) for c in spec.get("coeffs", ())]
    if not coeffs:
        raise ConfigurationError("exp_t species transport model needs a non-empty 'coeffs' list")
    return ExpTProperty(thermo, k, _weight(spec), coeffs=coeffs)


def species_property_from_spec(spec: Any, thermo, k: int) -> SpeciesTransportProperty:
    """Build the evaluator for one species; a bare number means a constant."""

    if isinstance(spec, (int, float)) and not isinstance(spec, bool):
        return ConstantProperty(thermo, k, 1.0, constant=float(spec))
    if not isinstance(spec, Mapping):
        raise ConfigurationError(f"Cannot read species transport model from {spec!r}")
    return build_species_property(spec.get("model", "constant"), spec, thermo, k)
