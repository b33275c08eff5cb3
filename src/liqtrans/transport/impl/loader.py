import json
import logging
from pathlib import Path
from typing import Any, Dict, Union

from liqtrans.common.exceptions import ConfigurationError

# explicit imports register the mixing rules and species models
from . import species_props  # constant, arrhenius, coeffs, exp_t
from . import transport_mixers  # solvent, mole/mass fractions, log, exp_t, pairwise, stokes_einstein
from . import stefan_maxwell  # stefan_maxwell_ppn

_log = logging.getLogger(__name__)


def load_transport_db(json_path: Union[str, Path]) -> Dict[str, Any]:
    p = Path(json_path)
    try:
        data = json.loads(p.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ConfigurationError(f"Transport database {p} is not valid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigurationError(f"Transport database {p} must contain a JSON object")
    # accept both {model, params} and a bare database
    params = data.get("params", data)
    if not isinstance(params, dict):
        raise ConfigurationError(f"Transport database {p} must contain a JSON object")
    _log.debug("Loaded transport database %s (%d species entries)", p, len(params.get("species", {})))
    return params
