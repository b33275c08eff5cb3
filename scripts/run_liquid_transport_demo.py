"""Sweep LiCl-KCl composition and tabulate mixture viscosity, conductivity and ion coupling."""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
import sys

import numpy as np
import pandas as pd

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from liqtrans.transport import IonicLiquidState, load_liquid_transport_params

DATA = ROOT / "data" / "transport" / "licl_kcl.json"


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--db", default=DATA, type=Path, help="Liquid transport JSON database")
    parser.add_argument("--T", type=float, default=700.0, help="Temperature [K]")
    parser.add_argument("--points", type=int, default=11, help="Number of LiCl mole fractions in the sweep")
    parser.add_argument("--csv", type=Path, help="Write the table to this CSV file")
    parser.add_argument("--plot", type=Path, help="Save a viscosity/conductivity plot to this image file")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log configuration details")
    return parser.parse_args()


def build_state(T: float) -> IonicLiquidState:
    return IonicLiquidState(
        species_names=["Li+", "K+", "Cl-"],
        molecular_weights=[6.941e-3, 39.098e-3, 35.453e-3],
        temperature=T,
        charges=[1.0, 1.0, -1.0],
        partial_molar_volumes=[1.4e-5, 2.9e-5, 1.3e-5],
        dissociation=[1.0, 0.0, 1.0, 0.0, 1.0, 1.0],
    )


def set_salt_fraction(state: IonicLiquidState, x_licl: float) -> None:
    x_kcl = 1.0 - x_licl
    state.set_mole_fractions([0.5 * x_licl, 0.5 * x_kcl, 0.5])
    state.neutral_X = [x_licl, x_kcl]


def main():
    args = parse_args()
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    state = build_state(args.T)
    params = load_liquid_transport_params(args.db, state)

    rows = []
    # pure end members make the Stefan-Maxwell eps term singular
    for x_licl in np.linspace(0.05, 0.95, args.points):
        set_salt_fraction(state, x_licl)
        coupling = params.mixture_matrix("species_diffusivity")
        rows.append(
            {
                "x_LiCl": x_licl,
                "mu [Pa s]": params.mixture_value("viscosity"),
                "sigma [S/m]": params.mixture_value("ion_conductivity"),
                "M(Li+,K+)": coupling[0, 1],
                "M(Li+,Cl-)": coupling[0, 2],
                "M(K+,Cl-)": coupling[1, 2],
            }
        )
    table = pd.DataFrame(rows)
    print(f"[Liquid Transport Demo] T={args.T} K")
    print(table.to_string(index=False, float_format=lambda v: f"{v:.5e}"))

    if args.csv:
        table.to_csv(args.csv, index=False)
    if args.plot:
        import matplotlib.pyplot as plt

        fig, ax_mu = plt.subplots(figsize=(6, 4))
        ax_mu.plot(table["x_LiCl"], table["mu [Pa s]"], "o-", label="viscosity")
        ax_mu.set_xlabel("x LiCl")
        ax_mu.set_ylabel("viscosity [Pa s]")
        ax_sigma = ax_mu.twinx()
        ax_sigma.plot(table["x_LiCl"], table["sigma [S/m]"], "s--", color="tab:red", label="conductivity")
        ax_sigma.set_ylabel("ionic conductivity [S/m]")
        fig.tight_layout()
        fig.savefig(args.plot, dpi=150)


if __name__ == "__main__":
    main()
