from typing import Any, Callable, Dict

from liqtrans.common.exceptions import ConfigurationError

MIXING_RULES: Dict[str, Callable[..., Any]] = {}  # name -> MixingRule subclass
SPECIES_PROPERTIES: Dict[str, Callable[..., Any]] = {}  # name -> factory(spec, thermo, k)


def register(name: str, table: Dict[str, Callable[..., Any]] = MIXING_RULES):
    def deco(fn):
        table[name] = fn
        return fn
    return deco


def register_species_property(name: str):
    return register(name, SPECIES_PROPERTIES)


def build(name: str, *args, **kwargs) -> Any:
    if name not in MIXING_RULES:
        raise ConfigurationError(f"Mixing rule '{name}' not registered")
    return MIXING_RULES[name](*args, **kwargs)


def build_species_property(name: str, *args, **kwargs) -> Any:
    if name not in SPECIES_PROPERTIES:
        raise ConfigurationError(f"Species transport model '{name}' not registered")
    return SPECIES_PROPERTIES[name](*args, **kwargs)
