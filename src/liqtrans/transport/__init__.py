"""Convenience exports for liquid transport property interfaces."""

from .impl.coefficients import CoefficientFamily, InteractionCoefficients
from .impl.registry import build
from .impl.stefan_maxwell import StefanMaxwellPPN
from .impl.transport_mixers import (
    LogMoleFractionsMixing,
    MassFractionsMixing,
    MixingRule,
    MoleFractionsExpTMixing,
    MoleFractionsMixing,
    PairwiseInteraction,
    SolventMixing,
    StokesEinstein,
    TransportProperty,
)
from .interfaces import (
    IonicLiquidState,
    LiquidMixtureState,
    LiquidTransportData,
    LiquidTransportParams,
    build_liquid_transport_params,
    load_liquid_transport_params,
)

__all__ = [
    "CoefficientFamily",
    "InteractionCoefficients",
    "IonicLiquidState",
    "LiquidMixtureState",
    "LiquidTransportData",
    "LiquidTransportParams",
    "LogMoleFractionsMixing",
    "MassFractionsMixing",
    "MixingRule",
    "MoleFractionsExpTMixing",
    "MoleFractionsMixing",
    "PairwiseInteraction",
    "SolventMixing",
    "StefanMaxwellPPN",
    "StokesEinstein",
    "TransportProperty",
    "build",
    "build_liquid_transport_params",
    "load_liquid_transport_params",
]
