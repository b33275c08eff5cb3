"""Thermodynamic-state protocols, the transport parameter bundle and its builders."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Mapping, Optional, Protocol, Sequence, Tuple, Union

import numpy as np

from liqtrans.common.exceptions import (
    ConfigurationError,
    MissingPropertyData,
    UnsupportedOperation,
)

from .impl.loader import load_transport_db
from .impl.registry import build
from .impl.species_props import SpeciesTransportProperty, species_property_from_spec
from .impl.transport_mixers import MixingRule, TransportProperty

_log = logging.getLogger(__name__)


class ThermoState(Protocol):
    """What the mixing rules read from the owning phase."""

    n_species: int
    species_names: Sequence[str]
    temperature: float

    def mole_fractions(self) -> Sequence[float]: ...

    def mass_fractions(self) -> Sequence[float]: ...

    def species_index(self, name: str) -> int: ...

    def charge(self, k: int) -> float: ...

    def molar_volume(self) -> float: ...


class IonicThermoState(ThermoState, Protocol):
    """Ion phase built on a neutral-molecule phase (two salts, three ions)."""

    def neutral_molecule_mole_fractions(self) -> Sequence[float]: ...

    def cation_list(self) -> Sequence[int]: ...

    def anion_list(self) -> Sequence[int]: ...

    def dissociation_coeffs(self) -> Tuple[Sequence[float], Sequence[float]]: ...

    def dln_act_coeff_dln_n(self) -> Sequence[float]: ...


@dataclass
class LiquidMixtureState:
    """Minimal liquid state: names, molecular weights, T and mole fractions."""

    species_names: List[str]
    molecular_weights: List[float]  # kg/mol
    temperature: float = 298.15
    X: List[float] = field(default_factory=list)
    charges: List[float] = field(default_factory=list)
    partial_molar_volumes: List[float] = field(default_factory=list)  # m^3/mol

    def __post_init__(self):
        n = len(self.species_names)
        if len(self.molecular_weights) != n:
            raise ValueError("molecular_weights length must match species_names")
        if not self.X:
            self.X = [1.0 / n] * n
        if not self.charges:
            self.charges = [0.0] * n
        self.set_mole_fractions(self.X)

    @property
    def n_species(self) -> int:
        return len(self.species_names)

    def species_index(self, name: str) -> int:
        return self.species_names.index(name)

    def set_temperature(self, T: float) -> None:
        if T <= 0:
            raise ValueError("Temperature must be >0 K")
        self.temperature = T

    def set_mole_fractions(self, X: Union[Sequence[float], Mapping[str, float]]) -> None:
        if isinstance(X, Mapping):
            Xi = [float(X.get(name, 0.0)) for name in self.species_names]
        else:
            Xi = [float(x) for x in X]
        if len(Xi) != self.n_species:
            raise ValueError("len(X) must equal the number of species")
        total = sum(Xi)
        if total <= 0.0:
            raise ValueError("Mixture mole fractions all zero; provide nonzero X.")
        self.X = [x / total for x in Xi]

    def mole_fractions(self) -> List[float]:
        return list(self.X)

    def mass_fractions(self) -> List[float]:
        masses = [x * m for x, m in zip(self.X, self.molecular_weights)]
        total = sum(masses)
        return [m / total for m in masses]

    def charge(self, k: int) -> float:
        return self.charges[k]

    def molar_volume(self) -> float:
        if len(self.partial_molar_volumes) != self.n_species:
            raise MissingPropertyData("Molar volume requires partial molar volumes for every species")
        return sum(x * v for x, v in zip(self.X, self.partial_molar_volumes))


@dataclass
class IonicLiquidState(LiquidMixtureState):
    """Ion phase of two salts sharing an anion, e.g. LiCl-KCl.

    ``dissociation`` is the flat 2 x N stoichiometry (row = neutral salt,
    column = ion); ``neutral_X`` and ``dln_gamma`` describe the neutral-molecule
    phase as the activity model reports them.
    """

    dissociation: List[float] = field(default_factory=list)
    neutral_X: List[float] = field(default_factory=list)
    dln_gamma: List[float] = field(default_factory=list)

    def cation_list(self) -> List[int]:
        return [k for k in range(self.n_species) if self.charge(k) > 0]

    def anion_list(self) -> List[int]:
        return [k for k in range(self.n_species) if self.charge(k) < 0]

    def dissociation_coeffs(self) -> Tuple[List[float], List[float]]:
        if len(self.dissociation) != 2 * self.n_species:
            raise MissingPropertyData("Dissociation coefficients must hold two rows of one entry per ion")
        return list(self.dissociation), [self.charge(k) for k in range(self.n_species)]

    def neutral_molecule_mole_fractions(self) -> List[float]:
        return list(self.neutral_X)

    def dln_act_coeff_dln_n(self) -> List[float]:
        if not self.dln_gamma:
            return [0.0] * len(self.neutral_X)
        return list(self.dln_gamma)


@dataclass
class LiquidTransportData:
    """Per-species transport evaluators; None where the database has no entry."""

    name: str
    viscosity: Optional[SpeciesTransportProperty] = None
    ion_conductivity: Optional[SpeciesTransportProperty] = None
    thermal_conductivity: Optional[SpeciesTransportProperty] = None
    species_diffusivity: Optional[SpeciesTransportProperty] = None
    electrical_conductivity: Optional[SpeciesTransportProperty] = None
    hydrodynamic_radius: Optional[SpeciesTransportProperty] = None
    mobility_ratio: List[SpeciesTransportProperty] = field(default_factory=list)
    self_diffusion: List[SpeciesTransportProperty] = field(default_factory=list)


_SCALAR_PROPERTIES = (
    TransportProperty.VISCOSITY,
    TransportProperty.ION_CONDUCTIVITY,
    TransportProperty.THERMAL_CONDUCTIVITY,
    TransportProperty.SPECIES_DIFFUSIVITY,
    TransportProperty.ELECTRICAL_CONDUCTIVITY,
    TransportProperty.HYDRODYNAMIC_RADIUS,
)
_LIST_PROPERTIES = (TransportProperty.MOBILITY_RATIO, TransportProperty.SELF_DIFFUSION)


def _transport_property(prop: Union[str, TransportProperty]) -> TransportProperty:
    try:
        return TransportProperty(prop)
    except ValueError as exc:
        raise ConfigurationError(f"Unknown transport property '{prop}'") from exc


class LiquidTransportParams:
    """Owns the mixing rule bound to each property plus the species records.

    Copies are refused: the bound rules share the phase's state handle and the
    per-species evaluators, and a silent shallow copy would alias both.
    """

    def __init__(self, thermo, species_data: Optional[List[LiquidTransportData]] = None):
        self.thermo = thermo
        self.species_data: List[LiquidTransportData] = species_data or []
        self.viscosity: Optional[MixingRule] = None
        self.ion_conductivity: Optional[MixingRule] = None
        self.thermal_conductivity: Optional[MixingRule] = None
        self.species_diffusivity: Optional[MixingRule] = None
        self.electrical_conductivity: Optional[MixingRule] = None
        self.hydrodynamic_radius: Optional[MixingRule] = None
        self.mobility_ratio: List[MixingRule] = []
        self.mob_rat_index: List[str] = []
        self.self_diffusion: List[MixingRule] = []
        self.self_diff_index: List[str] = []

    def __copy__(self):
        raise UnsupportedOperation("LiquidTransportParams cannot be copied")

    def __deepcopy__(self, memo):
        raise UnsupportedOperation("LiquidTransportParams cannot be copied")

    def rules(self) -> List[MixingRule]:
        bound = [getattr(self, prop.value) for prop in _SCALAR_PROPERTIES]
        return [r for r in bound if r is not None] + self.mobility_ratio + self.self_diffusion

    def _rule(self, prop: Union[str, TransportProperty]) -> MixingRule:
        name = _transport_property(prop).value
        if TransportProperty(name) not in _SCALAR_PROPERTIES:
            raise ConfigurationError(f"'{name}' is not a mixture-level transport property")
        rule = getattr(self, name)
        if rule is None:
            raise MissingPropertyData(f"No mixing rule configured for {name}")
        return rule

    def mixture_value(self, prop: Union[str, TransportProperty]) -> float:
        """Mix the species evaluators of ``prop`` with its bound rule."""

        rule = self._rule(prop)
        name = _transport_property(prop).value
        return rule.mix_species([getattr(rec, name) for rec in self.species_data])

    def mixture_matrix(self, prop: Union[str, TransportProperty]) -> np.ndarray:
        return self._rule(prop).matrix()


def _species_record(name: str, entry: Mapping[str, Any], thermo, k: int) -> LiquidTransportData:
    record = LiquidTransportData(name=name)
    allowed = {p.value for p in _SCALAR_PROPERTIES + _LIST_PROPERTIES}
    for key, spec in entry.items():
        if key not in allowed:
            raise ConfigurationError(f"Unknown transport property '{key}' for species {name}")
        if TransportProperty(key) in _LIST_PROPERTIES:
            setattr(record, key, [species_property_from_spec(s, thermo, k) for s in spec])
        else:
            setattr(record, key, species_property_from_spec(spec, thermo, k))
    return record


def _build_rule(spec: Mapping[str, Any], prop: TransportProperty, thermo) -> MixingRule:
    if not isinstance(spec, Mapping) or "model" not in spec:
        raise ConfigurationError(f"Mixing rule for {prop.value} needs a 'model' entry")
    rule = build(spec["model"], prop, thermo)
    return rule.init(spec.get("interactions", ()), thermo)


def build_liquid_transport_params(db: Mapping[str, Any], thermo) -> LiquidTransportParams:
    """Create the parameter bundle for ``thermo`` from a parsed transport database."""

    species = db.get("species", {})
    for name in species:
        if name not in thermo.species_names:
            raise ConfigurationError(f"Unknown species {name}")
    records = [
        _species_record(name, species.get(name, {}), thermo, k)
        for k, name in enumerate(thermo.species_names)
    ]
    params = LiquidTransportParams(thermo, records)

    mixture = db.get("mixture", {})
    for key, spec in mixture.items():
        try:
            prop = TransportProperty(key)
        except ValueError as exc:
            raise ConfigurationError(f"Unknown mixture transport property '{key}'") from exc
        if prop is TransportProperty.MOBILITY_RATIO:
            for entry in spec:
                params.mobility_ratio.append(_build_rule(entry, prop, thermo))
                params.mob_rat_index.append(_entry_label(entry, "pair"))
        elif prop is TransportProperty.SELF_DIFFUSION:
            for entry in spec:
                params.self_diffusion.append(_build_rule(entry, prop, thermo))
                params.self_diff_index.append(_entry_label(entry, "species"))
        else:
            setattr(params, key, _build_rule(spec, prop, thermo))

    for rule in params.rules():
        rule.set_parameters(params)
    _log.debug(
        "Built liquid transport parameters for %d species: %s",
        len(records),
        {rule.property.value: rule.model for rule in params.rules()},
    )
    return params


def _entry_label(entry: Mapping[str, Any], key: str) -> str:
    if key not in entry:
        raise ConfigurationError(f"Sub-model entry {dict(entry)!r} is missing its '{key}' name")
    return str(entry[key])


def load_liquid_transport_params(json_path: Union[str, Path], thermo) -> LiquidTransportParams:
    return build_liquid_transport_params(load_transport_db(json_path), thermo)
