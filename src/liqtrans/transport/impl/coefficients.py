"""Pairwise interaction coefficients for liquid mixing rules.

Each family (A, B, D, E, H, S) is an ordered list of N x N matrices, one per
polynomial order in composition. Families are filled from an ``interaction``
block of the transport database::

    [
        {"name": "interaction", "speciesA": "LiCl(L)", "speciesB": "KCl(L)",
         "Hij": {"poly": [-1.0e3, 250.0], "units": "J/mol"},
         "Sij": {"value": 0.5, "units": "J/mol"}},
    ]

Energy-like coefficients (``Hij``, ``Sij``, ``Eij``) are divided by the gas
constant on insertion so that the mixing rules can use them directly against T.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, Iterator, List, Mapping

import numpy as np

from liqtrans.common.exceptions import ConfigurationError

from ..utils.units import R_UNIVERSAL, convert

_log = logging.getLogger(__name__)


@dataclass
class CoefficientFamily:
    """Grow-on-demand list of coefficient matrices indexed by polynomial order."""

    name: str
    n_species: int
    symmetric: bool = False
    matrices: List[np.ndarray] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.matrices)

    def __iter__(self) -> Iterator[np.ndarray]:
        return iter(self.matrices)

    def __getitem__(self, order: int) -> np.ndarray:
        return self.matrices[order]

    def ensure_order(self, n_orders: int) -> None:
        while len(self.matrices) < n_orders:
            self.matrices.append(np.zeros((self.n_species, self.n_species)))
            _log.debug("Grew coefficient family %s to %d order(s)", self.name, len(self.matrices))

    def set(self, order: int, i: int, j: int, value: float) -> None:
        self.ensure_order(order + 1)
        self.matrices[order][i, j] = value
        if self.symmetric:
            self.matrices[order][j, i] = value

    def value(self, order: int, i: int, j: int) -> float:
        """Coefficient at ``order``; orders never configured read as zero."""

        if order >= len(self.matrices):
            return 0.0
        return float(self.matrices[order][i, j])

    def check(self) -> None:
        shape = (self.n_species, self.n_species)
        for k, mat in enumerate(self.matrices):
            if mat.shape != shape:
                raise ConfigurationError(
                    f"Coefficient family {self.name} order {k} has shape {mat.shape}, expected {shape}"
                )


# child key -> (family attribute, unit tag, polynomial?)
_ENTRIES = {
    "Aij": ("A", "toSI", True),
    "Bij": ("B", "toSI", True),
    "Hij": ("H", "actEnergy", True),
    "Sij": ("S", "actEnergy", True),
    "Eij": ("E", "actEnergy", False),
    "Dij": ("D", "toSI", False),
}
_ATTRIBUTES = {"name", "speciesA", "speciesB"}


def read_coefficients(raw: Any, kind: str = "toSI") -> List[float]:
    """Return the coefficient sequence of one database entry.

    A scalar entry becomes a one-element sequence; an empty polynomial falls
    back to the scalar value (zero when absent).
    """

    units = None
    scalar = 0.0
    poly: Iterable[Any] = ()
    if isinstance(raw, Mapping):
        units = raw.get("units")
        scalar = raw.get("value", 0.0)
        poly = raw.get("poly") or ()
    elif isinstance(raw, (list, tuple)):
        poly = raw
    elif isinstance(raw, (int, float)) and not isinstance(raw, bool):
        scalar = raw
    else:
        raise ConfigurationError(f"Cannot read interaction coefficient from {raw!r}")
    try:
        coeffs = [convert(c, units, kind) for c in poly]
        if not coeffs:
            coeffs.append(convert(scalar, units, kind))
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"Non-numeric interaction coefficient in {raw!r}") from exc
    return coeffs


def _species_index(thermo, name: Any) -> int:
    if name is None:
        raise ConfigurationError("interaction element is missing a speciesA/speciesB attribute")
    try:
        k = thermo.species_index(name)
    except (KeyError, ValueError) as exc:
        raise ConfigurationError(f"Unknown species {name}") from exc
    if k < 0:
        raise ConfigurationError(f"Unknown species {name}")
    return k


class InteractionCoefficients:
    """Holds the A, B, D, E, H and S families for one mixing rule."""

    def __init__(self, n_species: int):
        self.n_species = n_species
        self.A = CoefficientFamily("A", n_species)
        self.B = CoefficientFamily("B", n_species)
        self.H = CoefficientFamily("H", n_species)
        self.S = CoefficientFamily("S", n_species)
        self.D = CoefficientFamily("D", n_species, symmetric=True)
        self.E = CoefficientFamily("E", n_species, symmetric=True)
        self.D.ensure_order(1)
        self.E.ensure_order(1)

    def families(self) -> List[CoefficientFamily]:
        return [self.A, self.B, self.D, self.E, self.H, self.S]

    def configure(self, block: Iterable[Mapping[str, Any]], thermo) -> None:
        for child in block or ():
            if not isinstance(child, Mapping):
                raise ConfigurationError(f"expected <interaction> element and got {child!r}")
            node_name = str(child.get("name", "interaction")).lower()
            if node_name != "interaction":
                raise ConfigurationError(f"expected <interaction> element and got <{node_name}>")
            unknown = set(child) - _ATTRIBUTES - set(_ENTRIES)
            if unknown:
                raise ConfigurationError(
                    f"Unrecognized child <{sorted(unknown)[0]}> in interaction element"
                )
            i = _species_index(thermo, child.get("speciesA"))
            j = _species_index(thermo, child.get("speciesB"))
            for key, (attr, kind, polynomial) in _ENTRIES.items():
                if key not in child:
                    continue
                coeffs = read_coefficients(child[key], kind)
                if not polynomial and len(coeffs) != 1:
                    raise ConfigurationError(f"{key} takes a single value, got {len(coeffs)}")
                if kind == "actEnergy":
                    coeffs = [c / R_UNIVERSAL for c in coeffs]
                family: CoefficientFamily = getattr(self, attr)
                for order, c in enumerate(coeffs):
                    family.set(order, i, j, c)
        for family in self.families():
            family.check()
