from typing import Optional

from liqtrans.common.exceptions import ConfigurationError

R_UNIVERSAL = 8.314462618  # J/mol/K
FARADAY = 96485.33212  # C/mol

# factor that turns a value in the given unit into SI (per-mole basis)
_TO_SI = {
    "": 1.0,
    "-": 1.0,
    "Pa*s": 1.0,
    "Pa-s": 1.0,
    "mPa*s": 1e-3,
    "cP": 1e-3,
    "P": 0.1,
    "m2/s": 1.0,
    "cm2/s": 1e-4,
    "S/m": 1.0,
    "mS/cm": 0.1,
    "S/cm": 100.0,
    "W/m/K": 1.0,
    "m": 1.0,
    "cm": 1e-2,
    "nm": 1e-9,
    "A": 1e-10,
    "1/K": 1.0,
    "K": 1.0,
    "m3/mol": 1.0,
    "cm3/mol": 1e-6,
}

# activation energies / entropies, converted to J/mol
_ACT_ENERGY = {
    "": 1.0,
    "J/mol": 1.0,
    "kJ/mol": 1e3,
    "J/kmol": 1e-3,
    "cal/mol": 4.184,
    "kcal/mol": 4184.0,
    "eV": 96485.33212,
    "K": R_UNIVERSAL,
}


def convert(value: float, units: Optional[str], kind: str = "toSI") -> float:
    """Convert ``value`` given in ``units`` using the ``toSI`` or ``actEnergy`` table."""

    if kind not in ("toSI", "actEnergy"):
        raise ConfigurationError(f"Unknown unit conversion tag '{kind}'")
    table = _ACT_ENERGY if kind == "actEnergy" else _TO_SI
    key = (units or "").strip()
    if key not in table:
        raise ConfigurationError(f"Unsupported {kind} unit '{units}'")
    return float(value) * table[key]
