"""Stefan-Maxwell coupling for a molten salt of two cations and one common anion.

The mixture is described by two neutral salts (e.g. LiCl, KCl) dissociating
into three ions. The returned 3 x 3 matrix combines the diffusive friction
between the ions, built from the cation mobility ratio, the self-diffusion
coefficients and the thermodynamic factor of the neutral-molecule phase, with
the electrostatic contribution z_a z_b F^2 / (R T sigma V).
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple

import numpy as np

from liqtrans.common.exceptions import (
    ConfigurationError,
    MissingPropertyData,
    ModelError,
    ValidationError,
)

from .registry import register
from .transport_mixers import MixingRule
from ..utils.units import FARADAY, R_UNIVERSAL

_log = logging.getLogger(__name__)

_VALID_DISSOCIATION = ("1001", "0110")


@register("stefan_maxwell_ppn")
class StefanMaxwellPPN(MixingRule):
    model = "stefan_maxwell_ppn"

    def __init__(self, prop=None, thermo=None):
        super().__init__(prop, thermo)
        self.ion_cond_model: Optional[MixingRule] = None
        self.ion_cond_species: List[Any] = []
        self.mob_rat_models: List[MixingRule] = []
        self.mob_rat_index: List[str] = []
        self.mob_rat_species: List[List[Any]] = []
        self.self_diff_models: List[MixingRule] = []
        self.self_diff_index: List[str] = []
        self.self_diff_species: List[List[Any]] = []

    def set_parameters(self, params) -> None:
        self.ion_cond_model = params.ion_conductivity
        self.ion_cond_species = [rec.ion_conductivity for rec in params.species_data]
        self.mob_rat_models = list(params.mobility_ratio)
        self.mob_rat_index = list(params.mob_rat_index)
        self.mob_rat_species = [
            [rec.mobility_ratio[k] if k < len(rec.mobility_ratio) else None for rec in params.species_data]
            for k in range(len(self.mob_rat_models))
        ]
        self.self_diff_models = list(params.self_diffusion)
        self.self_diff_index = list(params.self_diff_index)
        self.self_diff_species = [
            [rec.self_diffusion[k] if k < len(rec.self_diffusion) else None for rec in params.species_data]
            for k in range(len(self.self_diff_models))
        ]
        _log.debug(
            "Stefan-Maxwell PPN bound to %d mobility ratio(s) %s and %d self-diffusion model(s) %s",
            len(self.mob_rat_models),
            self.mob_rat_index,
            len(self.self_diff_models),
            self.self_diff_index,
        )

    def mix_values(self, values, weights=None):
        raise ModelError("Calling StefanMaxwellPPN.mix_values does not make sense.")

    def mix_species(self, handles):
        raise ModelError("Calling StefanMaxwellPPN.mix_species does not make sense.")

    def _classify(self) -> Tuple[List[int], List[int], List[float], List[float]]:
        thermo = self.thermo
        if thermo.n_species != 3:
            raise ValidationError("StefanMaxwellPPN may only be used with a 3-ion system")
        cation = list(thermo.cation_list())
        anion = list(thermo.anion_list())
        nu, charges = thermo.dissociation_coeffs()
        if len(anion) != 1:
            raise ValidationError("StefanMaxwellPPN must have one anion only")
        if len(cation) != 2:
            raise ValidationError("StefanMaxwellPPN must have two cations of equal charge")
        if charges[cation[0]] != charges[cation[1]]:
            raise ValidationError("StefanMaxwellPPN cations must be of equal charge")
        return cation, anion, list(nu), list(charges)

    def _ion_conductivity(self) -> float:
        if self.ion_cond_model is None:
            raise MissingPropertyData("StefanMaxwellPPN needs an ionic conductivity mixing rule")
        return self.ion_cond_model.mix_species(self.ion_cond_species)

    def _mobility_ratios(self, names: Sequence[str]) -> np.ndarray:
        nsp = len(names)
        ratio = np.zeros((nsp, nsp))
        for k, label in enumerate(self.mob_rat_index):
            found = False
            for i in range(nsp):
                for j in range(i):
                    if f"{names[i]}:{names[j]}" == label:
                        a, b = i, j
                    elif f"{names[j]}:{names[i]}" == label:
                        a, b = j, i
                    else:
                        continue
                    ratio[a, b] = self.mob_rat_models[k].mix_species(self.mob_rat_species[k])
                    if ratio[a, b] > 0:
                        ratio[b, a] = 1.0 / ratio[a, b]
                    found = True
                    break
                if found:
                    break
            if not found:
                raise ConfigurationError(
                    f"Incorrect names for mobility ratio of {label} rather than i.e. {names[0]}:{names[1]}"
                )
        return ratio

    def _self_diffusion(self, names: Sequence[str]) -> np.ndarray:
        lookup: Dict[str, int] = {name: k for k, name in enumerate(names)}
        diff = np.zeros(len(names))
        filled = set()
        for k, label in enumerate(self.self_diff_index):
            if label not in lookup:
                raise ConfigurationError(
                    f"Incorrect names for self diffusion of {label} rather than i.e. {names[0]}"
                )
            diff[lookup[label]] = self.self_diff_models[k].mix_species(self.self_diff_species[k])
            filled.add(lookup[label])
        for k, name in enumerate(names):
            if k not in filled:
                raise ConfigurationError(f"Incorrect names for self diffusion: no model configured for {name}")
        return diff

    def matrix(self, values=None) -> np.ndarray:
        thermo = self.thermo
        cation, anion, nu, charges = self._classify()
        nsp = thermo.n_species
        names = list(thermo.species_names)
        T = thermo.temperature
        neut_fracs = list(thermo.neutral_molecule_mole_fractions())

        sigma = self._ion_conductivity()
        vol = thermo.molar_volume()
        ratio = self._mobility_ratios(names)
        self_diff = self._self_diffusion(names)

        c0, c1 = cation
        a0 = anion[0]
        vP = max(nu[c0], nu[c1])
        vM = nu[a0]
        zP = charges[c0]
        zM = charges[a0]

        # which cation belongs to which dissociation reaction
        pattern = "".join(
            "1" if nu[i * nsp + cation[j]] > 0 else "0" for i in range(2) for j in range(2)
        )
        if pattern not in _VALID_DISSOCIATION:
            raise ModelError(f"Dissociation reactions don't make sense: cationIndex = {pattern}")

        xA = neut_fracs[c0]
        xB = neut_fracs[c1]
        r10 = ratio[c1, c0]
        eps = (1.0 - r10) / (xA + xB * r10)
        dln_gamma = list(thermo.dln_act_coeff_dln_n())
        inv_mutual = (
            xA * (1.0 + dln_gamma[c1]) / self_diff[c1]
            + xB * (1.0 + dln_gamma[c0]) / self_diff[c0]
        )

        if sigma <= 0.0 or vol <= 0.0:
            raise ModelError(
                f"StefanMaxwellPPN needs a positive ionic conductivity and molar volume, got {sigma} and {vol}"
            )
        electro = FARADAY * FARADAY / (R_UNIVERSAL * T * sigma * vol)
        mat = np.zeros((nsp, nsp))
        mat[c0, c1] = mat[c1, c0] = (
            (1.0 + vM / vP) * (1.0 + eps * xB) * (1.0 - eps * xA) * inv_mutual - zP * zP * electro
        )
        mat[c0, a0] = mat[a0, c0] = (
            (1.0 + vP / vM) * (-eps * xB * (1.0 - eps * xA) * inv_mutual) - zP * zM * electro
        )
        mat[c1, a0] = mat[a0, c1] = (
            (1.0 + vP / vM) * (eps * xA * (1.0 + eps * xB) * inv_mutual) - zP * zM * electro
        )
        return mat
