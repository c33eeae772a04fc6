"""
Chemical equilibrium by Gibbs free-energy minimization.

For an ideal-gas mixture at fixed T and P the equilibrium mole numbers
minimize

    G/RT = sum_i N_i (g_i + ln(N_i / N))        g_i = G_i(T, P) / RT

subject to element conservation  sum_i B_ij N_i = b_j.  Stationarity of the
Lagrangian gives every species in terms of the element potentials lambda
and the total moles N = exp(s):

    N_i = exp(sum_j B_ij lambda_j - g_i + s)

The solver works on this dual form:

1. For fixed s, lambda maximizes the concave function
       L(lambda) = lambda . b - sum_i N_i(lambda)
   whose gradient is the element-balance residual b - B^T N and whose
   negative Hessian is B^T diag(N) B. Newton steps with a backtracking
   line search converge from any start.
   The Newton system is scaled by its diagonal. Ions and electrons can
   sit near exp(-300) at room temperature, so the charge row of the
   Hessian is hundreds of orders of magnitude below the others.
2. The charge potential is re-solved exactly before every Newton step.
   Neutrality is a one-dimensional monotone equation in the charge
   potential alone, solved in the log domain so trace ions never underflow.
3. The total moles follow from the scalar condition ln(sum_i N_i) = s,
   solved with a bracketed root finder.

Mole fractions are positive by construction and sum to one exactly.
Elements absent from the composition are removed together with the
species that would require them, which keeps the element system full rank.

References:
    - Gordon, S. & McBride, B.J. (1994). NASA RP-1311, Ch. 2.
    - Smith, W.R. & Missen, R.W. (1982). "Chemical Reaction Equilibrium
      Analysis: Theory and Algorithms", Wiley.
"""

import logging

import numpy as np
from numpy.typing import NDArray
from scipy import linalg, optimize
from scipy.special import logsumexp

from .types import (
    ConvergenceError,
    EquilibriumResult,
    InvalidStateError,
    SingularMatrixError,
)

logger = logging.getLogger(__name__)


# Newton iterations per inner (element potential) solve
MAX_NEWTON_ITERATIONS = 200

# Element-balance tolerance relative to the largest element total
BALANCE_TOLERANCE = 1e-12

# Attempts at widening the total-moles bracket
MAX_BRACKET_STEPS = 60

# Residual below which a stalled Newton iteration is accepted
STAGNATION_TOLERANCE = 1e-9

# Largest exponent used for the starting potentials
MAX_EXPONENT = 600.0

# Exponent clip when evaluating mole numbers
EXP_CLIP = 700.0


def reduce_element_system(
    B: NDArray[np.float64],
    b: NDArray[np.float64],
    charge_element: int = -1,
) -> tuple[NDArray[np.bool_], NDArray[np.bool_]]:
    """
    Remove elements with zero abundance and the species they forbid.

    An element with b_j = 0 whose nonzero coefficients all share one sign
    can only be conserved if every species containing it is absent. Both
    the element and those species are dropped; this repeats until nothing
    changes. An element with b_j = 0 and coefficients of both signs (the
    charge element in a neutral plasma) stays.

    Args:
        B: (n_species, n_elements) composition matrix
        b: Element abundances
        charge_element: Index of the charge element, or -1

    Returns:
        (species_mask, element_mask) of the retained system

    Raises:
        InvalidStateError: If a present element has no species left
    """
    n_species, n_elements = B.shape
    species = np.ones(n_species, dtype=np.bool_)
    elements = np.ones(n_elements, dtype=np.bool_)

    changed = True
    while changed:
        changed = False
        for j in range(n_elements):
            if not elements[j] or b[j] != 0.0:
                continue
            column = B[species, j]
            nonzero = column[column != 0.0]
            if nonzero.size == 0:
                elements[j] = False
                changed = True
            elif np.all(nonzero > 0.0) or np.all(nonzero < 0.0):
                species &= B[:, j] == 0.0
                elements[j] = False
                changed = True

    for j in np.nonzero(elements)[0]:
        if not np.any(B[species, j] != 0.0):
            kind = "charge" if j == charge_element else "element"
            raise InvalidStateError(
                f"Composition requires {kind} column {j} but no remaining "
                f"species contains it"
            )
    if not np.any(species):
        raise InvalidStateError("No species can satisfy the element composition")

    return species, elements


class EquilibriumSolver:
    """
    Element-potential Gibbs minimizer for one fixed species set.

    Attributes:
        element_matrix: (n_species, n_elements) composition matrix
        species_names: Names used in results
        charge_element: Index of the charge element or -1
    """

    def __init__(
        self,
        element_matrix: NDArray[np.float64],
        species_names: list[str],
        charge_element: int = -1,
        max_iterations: int = MAX_NEWTON_ITERATIONS,
        tolerance: float = BALANCE_TOLERANCE,
    ):
        self.element_matrix = np.asarray(element_matrix, dtype=np.float64)
        self.species_names = list(species_names)
        self.charge_element = charge_element
        self.max_iterations = max_iterations
        self.tolerance = tolerance

    @property
    def n_species(self) -> int:
        return self.element_matrix.shape[0]

    @property
    def n_elements(self) -> int:
        return self.element_matrix.shape[1]

    def check_composition(self, composition) -> NDArray[np.float64]:
        """
        Validate and normalize an element composition.

        Only the charge element may be negative (net positive charge).

        Raises:
            ValueError: If the length does not match the element count
            InvalidStateError: If an entry is negative or not finite, or
                the sum of the element entries is not positive
        """
        c = np.asarray(composition, dtype=np.float64)
        if c.shape != (self.n_elements,):
            raise ValueError(
                f"Expected {self.n_elements} element values, got shape {c.shape}"
            )
        if not np.all(np.isfinite(c)):
            raise InvalidStateError("Element composition must be finite")
        atoms = np.ones(self.n_elements, dtype=np.bool_)
        if self.charge_element >= 0:
            atoms[self.charge_element] = False
        if np.any(c[atoms] < 0.0):
            raise InvalidStateError(
                f"Element composition must be non-negative (got {c.tolist()})"
            )
        total = c.sum()
        if not total > 0.0:
            raise InvalidStateError("Element composition must have a positive sum")
        return c / total

    def solve(
        self,
        T: float,
        P: float,
        g: NDArray[np.float64],
        composition,
    ) -> EquilibriumResult:
        """
        Compute the equilibrium composition.

        Args:
            T: Temperature (K), must be positive
            P: Pressure (Pa), must be positive
            g: Species G/RT at (T, P)
            composition: Element amounts (any positive scale)

        Returns:
            EquilibriumResult with mole fractions summing to one

        Raises:
            InvalidStateError: For non-positive T or P or an infeasible
                composition
            ConvergenceError: If the Newton or total-moles iteration fails
            SingularMatrixError: If the element system is degenerate
        """
        if not T > 0.0:
            raise InvalidStateError(f"Temperature must be positive (got {T} K)")
        if not P > 0.0:
            raise InvalidStateError(f"Pressure must be positive (got {P} Pa)")

        b_full = self.check_composition(composition)
        species, elements = reduce_element_system(
            self.element_matrix, b_full, self.charge_element
        )

        B = self.element_matrix[species][:, elements]
        b = b_full[elements]
        gs = np.asarray(g, dtype=np.float64)[species]

        charge = -1
        if self.charge_element >= 0 and elements[self.charge_element]:
            charge = int(np.count_nonzero(elements[:self.charge_element]))

        problem = _DualProblem(B, b, gs, self.max_iterations, self.tolerance, charge)
        s = problem.solve_total_moles()
        lam, N = problem.lam, problem.N

        moles = np.zeros(self.n_species, dtype=np.float64)
        moles[species] = N
        total = moles.sum()
        x = moles / total

        potentials = np.full(self.n_elements, np.nan, dtype=np.float64)
        potentials[elements] = lam
        residual = float(np.max(np.abs(B.T @ N - b))) if b.size else 0.0

        logger.debug(
            "Equilibrium at T=%.1f K, P=%.1f Pa: %d Newton iterations, "
            "ln(N)=%.6f, residual=%.3e",
            T, P, problem.iterations, s, residual,
        )

        return EquilibriumResult(
            temperature=float(T),
            pressure=float(P),
            species_names=self.species_names,
            mole_fractions=x,
            moles=moles,
            total_moles=float(total),
            element_potentials=potentials,
            iterations=problem.iterations,
            residual=residual,
        )


class _DualProblem:
    """Inner Newton solve for lambda and outer root solve for ln(N)."""

    def __init__(self, B, b, g, max_iterations, tolerance, charge=-1):
        self.B = B
        self._abs_B = np.abs(B)
        self.b = b
        self.g = g
        self.charge = charge
        self.max_iterations = max_iterations
        self.tolerance = tolerance
        self.iterations = 0
        self.lam = self._initial_potentials(0.0)
        self.N = np.zeros_like(g)

    def _initial_potentials(self, s: float) -> NDArray[np.float64]:
        """Potentials that spread the total moles evenly over all species."""
        n = self.g.shape[0]
        target = self.g - s - np.log(n)
        lam, *_ = linalg.lstsq(self.B, target)
        if np.max(self.B @ lam - self.g + s) > MAX_EXPONENT:
            lam = np.zeros(self.B.shape[1], dtype=np.float64)
        return lam

    def _moles(self, lam: NDArray[np.float64], s: float) -> NDArray[np.float64]:
        z = self.B @ lam - self.g + s
        with np.errstate(over="ignore"):
            return np.exp(np.minimum(z, EXP_CLIP))

    def _objective(self, lam, s) -> float:
        N = self._moles(lam, s)
        return float(N.sum() - lam @ self.b)

    def _balance_charge(self, lam: NDArray[np.float64], s: float) -> NDArray[np.float64]:
        """
        Potentials with the charge potential set to satisfy neutrality.

        With every other potential fixed, the charge balance
            sum_{c_i > 0} c_i N_i - sum_{c_i < 0} |c_i| N_i = b_e
        is strictly increasing in the charge potential. Both sides are kept
        as logarithms of sums. The potentials are returned unchanged when
        the balance has no root (one side empty).
        """
        e = self.charge
        c = self.B[:, e]
        z = self.B @ lam - self.g + s - c * lam[e]
        pos, neg = c > 0.0, c < 0.0
        b_e = float(self.b[e])

        ln_pos = np.append(z[pos] + np.log(c[pos]), np.log(-b_e) if b_e < 0.0 else -np.inf)
        ln_neg = np.append(z[neg] + np.log(-c[neg]), np.log(b_e) if b_e > 0.0 else -np.inf)
        c_pos = np.append(c[pos], 0.0)
        c_neg = np.append(c[neg], 0.0)
        if not (np.any(np.isfinite(ln_pos)) and np.any(np.isfinite(ln_neg))):
            return lam

        def imbalance(x: float) -> float:
            return float(logsumexp(ln_pos + c_pos * x) - logsumexp(ln_neg + c_neg * x))

        x0 = float(lam[e])
        f0 = imbalance(x0)
        if f0 == 0.0:
            return lam
        direction = -1.0 if f0 > 0.0 else 1.0
        step = 1.0
        lo, f_lo = x0, f0
        for _ in range(MAX_BRACKET_STEPS):
            hi = lo + direction * step
            f_hi = imbalance(hi)
            if f_hi == 0.0 or np.sign(f_hi) != np.sign(f_lo):
                break
            lo, f_lo = hi, f_hi
            step *= 2.0
        else:
            return lam

        balanced = lam.copy()
        if f_hi == 0.0:
            balanced[e] = hi
        else:
            a, b = (lo, hi) if lo < hi else (hi, lo)
            balanced[e] = optimize.brentq(imbalance, a, b, xtol=1e-14, rtol=8.9e-16)
        return balanced

    def _newton_step(self, N, residual) -> NDArray[np.float64]:
        H = (self.B.T * N) @ self.B
        d = np.sqrt(np.diag(H))
        d[~(d > 0.0)] = 1.0
        Hs = H / np.outer(d, d)
        rs = residual / d
        try:
            return linalg.solve(Hs, rs, assume_a="pos") / d
        except (linalg.LinAlgError, ValueError):
            try:
                step, *_ = linalg.lstsq(Hs, rs)
            except (linalg.LinAlgError, ValueError) as exc:
                raise SingularMatrixError(
                    f"Element potential system is singular: {exc}"
                ) from exc
            return step / d

    def solve_potentials(self, s: float) -> NDArray[np.float64]:
        """
        Newton iteration on the element potentials at fixed ln(N) = s.

        Returns the mole numbers; the potentials are kept as a warm start
        for the next call.
        """
        lam = self.lam.copy()
        last_error = np.inf
        for _ in range(self.max_iterations):
            self.iterations += 1
            if self.charge >= 0:
                lam = self._balance_charge(lam, s)
            N = self._moles(lam, s)
            if not np.all(np.isfinite(N)):
                break
            residual = self.b - self.B.T @ N
            error = np.max(np.abs(residual)) if residual.size else 0.0
            scale = max(1.0, float(np.max(self._abs_B.T @ N)) if residual.size else 1.0)
            if error <= self.tolerance * scale:
                self.lam, self.N = lam, N
                return N
            # Round-off floor reached
            if error < STAGNATION_TOLERANCE * scale and error >= last_error:
                self.lam, self.N = lam, N
                return N
            last_error = error

            step = self._newton_step(N, residual)
            if not np.all(np.isfinite(step)):
                raise SingularMatrixError("Element potential step is not finite")

            # Near the solution the full step is quadratically convergent
            if error < 1e-8 * scale:
                lam = lam + step
                continue

            f0 = N.sum() - lam @ self.b
            slope = -(residual @ step)
            alpha = 1.0
            while alpha > 1e-12:
                trial = lam + alpha * step
                f1 = self._objective(trial, s)
                if np.isfinite(f1) and f1 <= f0 + 1e-4 * alpha * slope:
                    break
                alpha *= 0.5
            else:
                break
            lam = trial

        raise ConvergenceError(
            f"Element potentials did not converge at ln(N)={s:.6g}",
            last_iterate=lam,
            iterations=self.iterations,
        )

    def residual_total_moles(self, s: float) -> float:
        N = self.solve_potentials(s)
        return float(np.log(N.sum()) - s)

    def solve_total_moles(self) -> float:
        """Bracket and solve ln(sum N_i(s)) = s for s."""
        s0 = 0.0
        r0 = self.residual_total_moles(s0)
        if r0 == 0.0:
            return s0

        # The residual decreases with s: too many moles means s is too small
        direction = 1.0 if r0 > 0.0 else -1.0
        step = 1.0
        lo, r_lo = s0, r0
        for _ in range(MAX_BRACKET_STEPS):
            hi = lo + direction * step
            r_hi = self.residual_total_moles(hi)
            if r_hi == 0.0:
                return hi
            if np.sign(r_hi) != np.sign(r_lo):
                break
            lo, r_lo = hi, r_hi
            step *= 2.0
        else:
            raise ConvergenceError(
                "Could not bracket the total number of moles",
                last_iterate=self.lam,
                iterations=self.iterations,
            )

        a, b = (lo, hi) if lo < hi else (hi, lo)
        s = optimize.brentq(
            self.residual_total_moles, a, b, xtol=1e-14, rtol=8.9e-16, maxiter=200
        )
        self.solve_potentials(s)
        return s
