"""
Physical constants for gas-mixture thermochemistry.

All values are SI. Fundamental constants are the exact CODATA 2018 values;
the electron molar mass is the CODATA 2018 recommended value.

References:
    - CODATA 2018 recommended values
    - NIST Chemistry WebBook
"""

from typing import Final

import numpy as np

# Universal Gas Constant (J/(mol·K))
# CODATA 2018 exact value
RU: Final[float] = 8.31446261815324

# Boltzmann constant (J/K)
KB: Final[float] = 1.380649e-23

# Avogadro's number (1/mol)
NA: Final[float] = 6.02214076e23

# Planck constant (J·s)
HP: Final[float] = 6.62607015e-34

# Elementary charge (C)
QE: Final[float] = 1.602176634e-19

# Electron molar mass (kg/mol)
MW_ELECTRON: Final[float] = 5.48579909065e-7

# One standard atmosphere (Pa)
ONEATM: Final[float] = 101325.0

# Standard-state temperature (K) and pressure (Pa) shared by all thermo databases
STANDARD_T: Final[float] = 298.15
STANDARD_P: Final[float] = ONEATM

# Unit conversion: calorie (thermochemical) to joule
CAL_TO_J: Final[float] = 4.184

# Electron-volt per particle expressed as J/mol
EV_TO_J_PER_MOL: Final[float] = QE * NA

TWO_PI: Final[float] = 2.0 * np.pi

# Name of the pseudo-element that carries charge
ELECTRON_ELEMENT: Final[str] = "e-"
