"""aerochem - equilibrium and kinetics of reacting gas mixtures."""

__version__ = "0.1.0"
