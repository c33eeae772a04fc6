"""
Built-in chemistry data for weakly ionized air and hydrogen-oxygen systems.

Contains element weights, species definitions, RRHO spectroscopic
constants, NASA-7 polynomials and two reaction mechanisms, enough to run
equilibrium and finite-rate calculations without an external data
directory.

References:
    - Gurvich, L.V. et al. (1989). "Thermodynamic Properties of Individual
      Substances", 4th ed.
    - Huber, K.P. & Herzberg, G. (1979). "Constants of Diatomic Molecules"
    - NIST Atomic Spectra Database (electronic levels)
    - McBride, B.J., Zehe, M.J., & Gordon, S. (2002). NASA/TP-2002-211556.
    - Park, C. (1990). "Nonequilibrium Hypersonic Aerothermodynamics", Wiley.
    - Park, C. et al. (1993). "Review of Chemical-Kinetic Problems of Future
      NASA Missions, I: Earth Entries", J. Thermophys. Heat Transfer 7(3).
"""

import numpy as np

from ..core.constants import MW_ELECTRON
from ..core.reaction import ArrheniusUnits, MechanismRecord, ReactionRecord
from ..core.types import NASA7Data, RRHOData


# =============================================================================
# Elements (name, atomic weight kg/mol, charge), in database order
# =============================================================================

ELEMENT_DATA: list[tuple[str, float, int]] = [
    ("e-", MW_ELECTRON, -1),
    ("H", 1.00794e-3, 0),
    ("C", 12.0107e-3, 0),
    ("N", 14.0067e-3, 0),
    ("O", 15.9994e-3, 0),
    ("Ar", 39.948e-3, 0),
]


# =============================================================================
# Species (name, composition), in database order
# =============================================================================

SPECIES_DATA: list[tuple[str, dict[str, int]]] = [
    ("e-", {"e-": 1}),
    ("N", {"N": 1}),
    ("N+", {"N": 1, "e-": -1}),
    ("O", {"O": 1}),
    ("O+", {"O": 1, "e-": -1}),
    ("NO", {"N": 1, "O": 1}),
    ("NO+", {"N": 1, "O": 1, "e-": -1}),
    ("N2", {"N": 2}),
    ("N2+", {"N": 2, "e-": -1}),
    ("O2", {"O": 2}),
    ("O2+", {"O": 2, "e-": -1}),
    ("H", {"H": 1}),
    ("H2", {"H": 2}),
    ("OH", {"O": 1, "H": 1}),
    ("H2O", {"H": 2, "O": 1}),
]


# =============================================================================
# RRHO Data
# Electronic levels are (degeneracy, characteristic temperature K)
# Formation enthalpies at 298.15 K in J/mol
# =============================================================================

RRHO_DATA: dict[str, RRHOData] = {
    "e-": RRHOData(
        name="e-",
        electronic_levels=((2, 0.0),),
        hf298=0.0,
    ),
    "N": RRHOData(
        name="N",
        electronic_levels=((4, 0.0), (10, 27658.0), (6, 41495.0)),
        hf298=472680.0,
    ),
    "N+": RRHOData(
        name="N+",
        electronic_levels=(
            (1, 0.0), (3, 70.07), (5, 188.19), (5, 22037.0), (1, 47033.0),
        ),
        hf298=1882128.0,
    ),
    "O": RRHOData(
        name="O",
        electronic_levels=(
            (5, 0.0), (3, 227.7), (1, 326.6), (5, 22831.0), (1, 48621.0),
        ),
        hf298=249175.0,
    ),
    "O+": RRHOData(
        name="O+",
        electronic_levels=((4, 0.0), (10, 38575.0), (6, 58226.0)),
        hf298=1568787.0,
    ),
    "NO": RRHOData(
        name="NO",
        linearity=1,
        symmetry=1,
        rotational_temperatures=(2.45,),
        vibrational_temperatures=(2739.7,),
        electronic_levels=((2, 0.0), (2, 174.2), (4, 63258.0)),
        hf298=91271.0,
    ),
    "NO+": RRHOData(
        name="NO+",
        linearity=1,
        symmetry=1,
        rotational_temperatures=(2.88,),
        vibrational_temperatures=(3419.0,),
        electronic_levels=((1, 0.0), (3, 75090.0)),
        hf298=990185.0,
    ),
    "N2": RRHOData(
        name="N2",
        linearity=1,
        symmetry=2,
        rotational_temperatures=(2.886,),
        vibrational_temperatures=(3395.3,),
        electronic_levels=(
            (1, 0.0), (3, 72231.0), (6, 85778.0), (6, 86050.0), (3, 95351.0),
        ),
        hf298=0.0,
    ),
    "N2+": RRHOData(
        name="N2+",
        linearity=1,
        symmetry=2,
        rotational_temperatures=(2.78,),
        vibrational_temperatures=(3175.8,),
        electronic_levels=((2, 0.0), (4, 13189.0), (2, 36633.0)),
        hf298=1509508.0,
    ),
    "O2": RRHOData(
        name="O2",
        linearity=1,
        symmetry=2,
        rotational_temperatures=(2.08,),
        vibrational_temperatures=(2273.5,),
        electronic_levels=((3, 0.0), (2, 11392.0), (1, 18985.0), (1, 47560.0)),
        hf298=0.0,
    ),
    "O2+": RRHOData(
        name="O2+",
        linearity=1,
        symmetry=2,
        rotational_temperatures=(2.42,),
        vibrational_temperatures=(2741.0,),
        electronic_levels=((4, 0.0), (8, 47354.0)),
        hf298=1171828.0,
    ),
}


# =============================================================================
# NASA-7 Data (200 - 1000 - 6000 K)
# =============================================================================

def _nasa7(name, composition, high, low, t_range=(200.0, 1000.0, 6000.0)) -> NASA7Data:
    return NASA7Data(
        name=name,
        composition=dict(composition),
        phase="G",
        t_low=t_range[0],
        t_mid=t_range[1],
        t_high=t_range[2],
        coeffs_high=np.array(high, dtype=np.float64),
        coeffs_low=np.array(low, dtype=np.float64),
    )


NASA7_DATA: dict[str, NASA7Data] = {
    "N": _nasa7(
        "N", {"N": 1},
        high=[2.41594290E+00, 1.74890650E-04, -1.19023690E-07, 3.02262450E-11,
              -2.03609820E-15, 5.61337730E+04, 4.64960960E+00],
        low=[2.50000000E+00, 0.00000000E+00, 0.00000000E+00, 0.00000000E+00,
             0.00000000E+00, 5.61046370E+04, 4.19390870E+00],
    ),
    "O": _nasa7(
        "O", {"O": 1},
        high=[2.54363697E+00, -2.73162486E-05, -4.19029520E-09, 4.95481845E-12,
              -4.79553694E-16, 2.92260120E+04, 4.92229457E+00],
        low=[3.16826710E+00, -3.27931884E-03, 6.64306396E-06, -6.12806624E-09,
             2.11265971E-12, 2.91222592E+04, 2.05193346E+00],
    ),
    "NO": _nasa7(
        "NO", {"N": 1, "O": 1},
        high=[3.26071234E+00, 1.19101135E-03, -4.29122646E-07, 6.94481463E-11,
              -4.03295681E-15, 9.92143132E+03, 6.36900518E+00],
        low=[4.21859896E+00, -4.63988124E-03, 1.10443049E-05, -9.34055507E-09,
             2.80554874E-12, 9.84509964E+03, 2.28061001E+00],
    ),
    "N2": _nasa7(
        "N2", {"N": 2},
        high=[2.95257637E+00, 1.39690040E-03, -4.92631603E-07, 7.86010195E-11,
              -4.60755204E-15, -9.23948688E+02, 5.87188762E+00],
        low=[3.53100528E+00, -1.23660988E-04, -5.02999433E-07, 2.43530612E-09,
             -1.40881235E-12, -1.04697628E+03, 2.96747038E+00],
    ),
    "O2": _nasa7(
        "O2", {"O": 2},
        high=[3.66096065E+00, 6.56365811E-04, -1.41149627E-07, 2.05797935E-11,
              -1.29913436E-15, -1.21597718E+03, 3.41536279E+00],
        low=[3.78245636E+00, -2.99673416E-03, 9.84730201E-06, -9.68129509E-09,
             3.24372837E-12, -1.06394356E+03, 3.65767573E+00],
    ),
    "H": _nasa7(
        "H", {"H": 1},
        high=[2.50000286E+00, -5.65334214E-09, 3.63251723E-12, -9.19949720E-16,
              7.95260746E-20, 2.54736589E+04, -4.46698494E-01],
        low=[2.50000000E+00, 0.00000000E+00, 0.00000000E+00, 0.00000000E+00,
             0.00000000E+00, 2.54736599E+04, -4.46682853E-01],
    ),
    "H2": _nasa7(
        "H2", {"H": 2},
        high=[2.93286575E+00, 8.26608026E-04, -1.46402364E-07, 1.54100414E-11,
              -6.88804800E-16, -8.13065581E+02, -1.02432865E+00],
        low=[2.34433112E+00, 7.98052075E-03, -1.94781510E-05, 2.01572094E-08,
             -7.37611761E-12, -9.17935173E+02, 6.83010238E-01],
    ),
    "OH": _nasa7(
        "OH", {"O": 1, "H": 1},
        high=[2.83864607E+00, 1.10725586E-03, -2.93914978E-07, 4.20524247E-11,
              -2.42169092E-15, 3.69780808E+03, 5.84452662E+00],
        low=[3.99198424E+00, -2.40106655E-03, 4.61664033E-06, -3.87916306E-09,
             1.36319502E-12, 3.36889836E+03, -1.03998477E-01],
    ),
    "H2O": _nasa7(
        "H2O", {"H": 2, "O": 1},
        high=[2.67703787E+00, 2.97318329E-03, -7.73769690E-07, 9.44336689E-11,
              -4.26900959E-15, -2.98858938E+04, 6.88255571E+00],
        low=[4.19864056E+00, -2.03643410E-03, 6.52040211E-06, -5.48797062E-09,
             1.77197817E-12, -3.02937267E+04, -8.49032208E-01],
    ),
}


# =============================================================================
# Reaction Mechanisms (Park rates, A in cm-mol-s, activation in K)
# =============================================================================

PARK_UNITS = ArrheniusUnits(length="cm", quantity="mol", time="s", energy="K")

AIR5 = MechanismRecord(
    name="air5",
    items=[
        PARK_UNITS,
        ReactionRecord(
            "N2 + M = 2N + M", 7.0e21, -1.6, 113200.0,
            efficiencies=(("N", 4.2857), ("O", 4.2857)),
        ),
        ReactionRecord(
            "O2 + M = 2O + M", 2.0e21, -1.5, 59500.0,
            efficiencies=(("N", 5.0), ("O", 5.0)),
        ),
        ReactionRecord(
            "NO + M = N + O + M", 5.0e15, 0.0, 75500.0,
            efficiencies=(("N", 22.0), ("O", 22.0), ("NO", 22.0)),
        ),
        ReactionRecord("N2 + O = NO + N", 6.4e17, -1.0, 38400.0),
        ReactionRecord("NO + O = O2 + N", 8.4e12, 0.0, 19450.0),
    ],
)

NITROGEN_IONIZED = MechanismRecord(
    name="nitrogen5",
    items=[
        PARK_UNITS,
        ReactionRecord(
            "N2 + M = 2N + M", 7.0e21, -1.6, 113200.0,
            efficiencies=(("N", 4.2857), ("N+", 4.2857), ("e-", 1714.29)),
        ),
        ReactionRecord("N + e- = N+ + e- + e-", 2.5e34, -3.82, 168600.0),
        ReactionRecord("N + N = N2+ + e-", 4.4e7, 1.5, 67500.0),
        ReactionRecord("N2 + N+ = N + N2+", 1.0e12, 0.5, 12200.0),
    ],
)

MECHANISMS: dict[str, MechanismRecord] = {
    AIR5.name: AIR5,
    NITROGEN_IONIZED.name: NITROGEN_IONIZED,
}
