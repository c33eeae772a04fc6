"""
Analytic Jacobian of species production rates.

For reaction j with net rate of progress

    q_j = (kf_j prod_i c_i^nu'_ij - kb_j prod_i c_i^nu''_ij) M_j

the molar production of species i is  w_i = sum_j (nu''_ij - nu'_ij) q_j
and

    dq_j/dc_k = (dRf_j/dc_k - dRb_j/dc_k) M_j + (Rf_j - Rb_j) eff_jk

The power-law derivative is evaluated as nu c_k^(nu-1) times the product
over the other species, never by dividing the full product by c_k, so it is
exact when a concentration is zero.
"""

import numpy as np
from numpy.typing import NDArray


def mass_action_gradient(
    k: float,
    entries: list[tuple[int, int]],
    conc: NDArray[np.float64],
    n_species: int,
) -> tuple[float, NDArray[np.float64]]:
    """
    Value and concentration gradient of k * prod c_i^nu_i.

    Args:
        k: Rate coefficient
        entries: (species, multiplicity) pairs
        conc: Species molar concentrations (mol/m^3)
        n_species: Length of the gradient

    Returns:
        (rate, gradient)
    """
    grad = np.zeros(n_species, dtype=np.float64)
    powers = [conc[idx] ** nu for idx, nu in entries]
    rate = k * float(np.prod(powers)) if entries else k

    for a, (idx, nu) in enumerate(entries):
        others = 1.0
        for b, p in enumerate(powers):
            if b != a:
                others *= p
        grad[idx] = k * nu * conc[idx] ** (nu - 1) * others
    return rate, grad


class JacobianManager:
    """
    Per-reaction bookkeeping needed to differentiate production rates.

    Reactions are registered as they are added to the mechanism; nothing
    here depends on temperature.
    """

    def __init__(self, n_species: int):
        self.n_species = n_species
        self._reactions: list[tuple[int, list, list, NDArray[np.float64] | None, NDArray[np.float64]]] = []

    def add_reaction(
        self,
        rxn: int,
        reactants: list[tuple[int, int]],
        products: list[tuple[int, int]],
        reversible: bool,
        efficiencies: NDArray[np.float64] | None = None,
    ) -> None:
        """
        Register one reaction.

        Args:
            rxn: Reaction index
            reactants: (species, multiplicity) pairs of the reactants
            products: (species, multiplicity) pairs of the products
            reversible: Whether a backward rate contributes
            efficiencies: dM/dc vector for third-body reactions, else None
        """
        delta = np.zeros(self.n_species, dtype=np.float64)
        for idx, nu in reactants:
            delta[idx] -= nu
        for idx, nu in products:
            delta[idx] += nu
        backward = list(products) if reversible else None
        self._reactions.append((rxn, list(reactants), backward, efficiencies, delta))

    def __len__(self) -> int:
        return len(self._reactions)

    def compute(
        self,
        kf: NDArray[np.float64],
        kb: NDArray[np.float64],
        conc: NDArray[np.float64],
    ) -> NDArray[np.float64]:
        """
        Molar Jacobian J[i, k] = d w_i / d c_k (1/s).

        Args:
            kf: Forward rate coefficients
            kb: Backward rate coefficients (ignored for irreversible reactions)
            conc: Species molar concentrations (mol/m^3)
        """
        ns = self.n_species
        jac = np.zeros((ns, ns), dtype=np.float64)
        total = float(conc.sum())

        for rxn, reactants, backward, eff, delta in self._reactions:
            rf, dq = mass_action_gradient(kf[rxn], reactants, conc, ns)
            rate = rf
            if backward is not None:
                rb, drb = mass_action_gradient(kb[rxn], backward, conc, ns)
                rate -= rb
                dq -= drb

            if eff is not None:
                m = total + float((eff - 1.0) @ conc)
                dq = dq * m + rate * eff

            jac += np.outer(delta, dq)

        return jac
