"""
Sparse stoichiometry accumulators.

Each manager stores, for one role (reactants, reversible products or
irreversible products), the species taking part in every reaction it knows
with their multiplicities. The flat index arrays let numpy scatter and
gather over all reactions at once:

    incr_species:   s[species] += nu * r[rxn]       (production rates)
    incr_reactions: r[rxn]     += nu * s[species]   (Gibbs sums, deltas)
    mult_reactions: r[rxn]     *= s[species] ** nu  (mass-action products)
"""

from collections.abc import Sequence

import numpy as np
from numpy.typing import NDArray


class StoichiometryManager:
    """Sparse (reaction, species, multiplicity) table for one role."""

    def __init__(self):
        self._entries: dict[int, list[tuple[int, int]]] = {}
        self._flat: tuple[NDArray[np.int64], NDArray[np.int64], NDArray[np.float64]] | None = None

    def add_reaction(self, rxn: int, species: Sequence[int]) -> None:
        """
        Register the species of one reaction.

        Repeated indices collapse into a single entry whose multiplicity is
        the repeat count, in order of first appearance.
        """
        if rxn in self._entries:
            raise ValueError(f"Reaction {rxn} is already registered")
        counts: dict[int, int] = {}
        for idx in species:
            counts[int(idx)] = counts.get(int(idx), 0) + 1
        self._entries[rxn] = list(counts.items())
        self._flat = None

    def entries(self, rxn: int) -> list[tuple[int, int]]:
        """(species, multiplicity) pairs of a reaction, empty if unknown."""
        return list(self._entries.get(rxn, []))

    def reactions(self) -> list[int]:
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, rxn: int) -> bool:
        return rxn in self._entries

    def _arrays(self):
        if self._flat is None:
            rxns, species, nu = [], [], []
            for rxn, entries in self._entries.items():
                for idx, mult in entries:
                    rxns.append(rxn)
                    species.append(idx)
                    nu.append(mult)
            self._flat = (
                np.array(rxns, dtype=np.int64),
                np.array(species, dtype=np.int64),
                np.array(nu, dtype=np.float64),
            )
        return self._flat

    def incr_species(self, r: NDArray[np.float64], s: NDArray[np.float64]) -> None:
        """s[i] += nu_ij * r[j] over all entries."""
        rxns, species, nu = self._arrays()
        np.add.at(s, species, nu * r[rxns])

    def decr_species(self, r: NDArray[np.float64], s: NDArray[np.float64]) -> None:
        """s[i] -= nu_ij * r[j] over all entries."""
        rxns, species, nu = self._arrays()
        np.subtract.at(s, species, nu * r[rxns])

    def incr_reactions(self, s: NDArray[np.float64], r: NDArray[np.float64]) -> None:
        """r[j] += nu_ij * s[i] over all entries."""
        rxns, species, nu = self._arrays()
        np.add.at(r, rxns, nu * s[species])

    def decr_reactions(self, s: NDArray[np.float64], r: NDArray[np.float64]) -> None:
        """r[j] -= nu_ij * s[i] over all entries."""
        rxns, species, nu = self._arrays()
        np.subtract.at(r, rxns, nu * s[species])

    def mult_reactions(self, s: NDArray[np.float64], r: NDArray[np.float64]) -> None:
        """r[j] *= prod_i s[i] ** nu_ij over all entries."""
        rxns, species, nu = self._arrays()
        np.multiply.at(r, rxns, s[species] ** nu)

    def sum_reactions(self, r: NDArray[np.float64]) -> None:
        """r[j] += sum_i nu_ij, the total multiplicity of each reaction."""
        rxns, _, nu = self._arrays()
        np.add.at(r, rxns, nu)


class ThirdbodyManager:
    """
    Third-body efficiencies of every third-body reaction.

    The effective concentration is M = sum_k c_k + sum_k (eff_k - 1) c_k;
    only species whose efficiency differs from one are stored.
    """

    def __init__(self, n_species: int):
        self.n_species = n_species
        self._alphas: dict[int, list[tuple[int, float]]] = {}

    def add_reaction(self, rxn: int, efficiencies: Sequence[tuple[int, float]]) -> None:
        if rxn in self._alphas:
            raise ValueError(f"Reaction {rxn} is already registered")
        self._alphas[rxn] = [
            (int(idx), float(eff) - 1.0) for idx, eff in efficiencies if eff != 1.0
        ]

    def __len__(self) -> int:
        return len(self._alphas)

    def __contains__(self, rxn: int) -> bool:
        return rxn in self._alphas

    def reactions(self) -> list[int]:
        return list(self._alphas)

    def efficiency_vector(self, rxn: int) -> NDArray[np.float64]:
        """dM/dc for one reaction: eff_k for every species."""
        eff = np.ones(self.n_species, dtype=np.float64)
        for idx, alpha in self._alphas[rxn]:
            eff[idx] += alpha
        return eff

    def thirdbody_concentration(self, rxn: int, conc: NDArray[np.float64]) -> float:
        m = float(conc.sum())
        for idx, alpha in self._alphas[rxn]:
            m += alpha * conc[idx]
        return m

    def thirdbody_concentrations(self, conc: NDArray[np.float64]) -> NDArray[np.float64]:
        """M_j for every registered reaction, in registration order."""
        return np.array(
            [self.thirdbody_concentration(rxn, conc) for rxn in self._alphas],
            dtype=np.float64,
        )

    def multiply_thirdbodies(self, conc: NDArray[np.float64], r: NDArray[np.float64]) -> None:
        """r[j] *= M_j for every third-body reaction j."""
        total = float(conc.sum())
        for rxn, alphas in self._alphas.items():
            m = total
            for idx, alpha in alphas:
                m += alpha * conc[idx]
            r[rxn] *= m
