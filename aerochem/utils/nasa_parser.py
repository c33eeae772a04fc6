"""
NASA 7-term polynomial thermodynamic data parser.

Parses CHEMKIN / NASA-7 fixed-width thermo files into NASA7Data records,
including the element composition fields of each species card so the
species formula is known without guessing it from the name.

References:
    - McBride, B.J., Gordon, S. & Reno, M.A. (1993). "Coefficients for
      Calculating Thermodynamic and Transport Properties of Individual
      Species" NASA TM-4513.
    - Kee, R.J. et al. CHEMKIN-II thermodynamic data format
"""

import re
from pathlib import Path

import numpy as np

from ..core.constants import ELECTRON_ELEMENT
from ..core.types import NASA7Data


class NASAParserError(Exception):
    """Exception raised for errors during NASA data parsing."""
    pass


NASA7Database = dict[str, NASA7Data]


def parse_nasa_file(filepath: str | Path) -> NASA7Database:
    """
    Parse a NASA-7 format thermodynamic data file.

    Args:
        filepath: Path to the .dat or .thermo file

    Returns:
        Dictionary mapping species names to NASA7Data objects, in file order

    Raises:
        NASAParserError: If the file holds no species entries
        FileNotFoundError: If file doesn't exist
    """
    path = Path(filepath)
    if not path.exists():
        raise FileNotFoundError(f"Thermodynamic data file not found: {path}")

    with open(path, encoding='utf-8', errors='replace') as f:
        content = f.read()

    database = parse_nasa7_text(content)
    if not database:
        raise NASAParserError(f"No NASA-7 species entries found in {path}")
    return database


def parse_nasa7_text(content: str) -> NASA7Database:
    """
    Parse NASA 7-term polynomial text.

    Format specification:
    - Line 1: Species name (cols 1-18), date (19-24), four element/count
              fields (25-44, 5 chars each), phase (45), T_low (46-55),
              T_high (56-65), T_mid (66-73), card number 1 (80)
    - Line 2: Coefficients a1-a5 for high-T range (5 x 15 chars each)
    - Line 3: Coefficients a6-a7 high-T, a1-a3 low-T (5 x 15 chars)
    - Line 4: Coefficients a4-a7 low-T (4 x 15 chars)

    Malformed entries are skipped.
    """
    species_db: NASA7Database = {}
    lines = content.split('\n')

    # Find the THERMO section
    thermo_start = -1
    thermo_end = len(lines)

    for i, line in enumerate(lines):
        if line.strip().upper().startswith('THERMO'):
            thermo_start = i + 1
        elif line.strip().upper() == 'END' and thermo_start >= 0:
            thermo_end = i
            break

    if thermo_start < 0:
        thermo_start = 0

    # Skip temperature range line if present
    if thermo_start < len(lines):
        temp_line = lines[thermo_start].strip()
        if re.match(r'^[\d\s.]+$', temp_line) and temp_line:
            thermo_start += 1

    i = thermo_start
    while i + 3 < thermo_end:
        header = lines[i]
        if len(header) < 80 or header.strip() == '' or header.startswith('!'):
            i += 1
            continue

        if header[79] == '1':
            species = _parse_species_entry(
                lines[i], lines[i+1], lines[i+2], lines[i+3]
            )
            if species is not None:
                species_db[species.name] = species
            i += 4
        else:
            i += 1

    return species_db


def _parse_species_entry(
    line1: str,
    line2: str,
    line3: str,
    line4: str
) -> NASA7Data | None:
    """
    Parse a single species entry from 4 lines of NASA-7 format data.

    Returns None if parsing fails.
    """
    line1 = line1.ljust(80)
    line2 = line2.ljust(80)
    line3 = line3.ljust(80)
    line4 = line4.ljust(80)

    if line2[79] != '2' or line3[79] != '3' or line4[79] != '4':
        return None

    name = line1[0:18].split()[0] if line1[0:18].strip() else ''
    if not name:
        return None

    phase = line1[44] if line1[44] in 'GLS' else 'G'

    try:
        t_low = float(line1[45:55].strip())
        t_high = float(line1[55:65].strip())
        t_mid = float(line1[65:73].strip()) if line1[65:73].strip() else 1000.0
    except ValueError:
        return None

    try:
        coeffs_high = np.array([
            _parse_coefficient(line2[0:15]),
            _parse_coefficient(line2[15:30]),
            _parse_coefficient(line2[30:45]),
            _parse_coefficient(line2[45:60]),
            _parse_coefficient(line2[60:75]),
            _parse_coefficient(line3[0:15]),
            _parse_coefficient(line3[15:30]),
        ], dtype=np.float64)

        coeffs_low = np.array([
            _parse_coefficient(line3[30:45]),
            _parse_coefficient(line3[45:60]),
            _parse_coefficient(line3[60:75]),
            _parse_coefficient(line4[0:15]),
            _parse_coefficient(line4[15:30]),
            _parse_coefficient(line4[30:45]),
            _parse_coefficient(line4[45:60]),
        ], dtype=np.float64)
    except ValueError:
        return None

    return NASA7Data(
        name=name,
        composition=_parse_composition(line1[24:44]),
        phase=phase,
        t_low=t_low,
        t_mid=t_mid,
        t_high=t_high,
        coeffs_high=coeffs_high,
        coeffs_low=coeffs_low,
    )


def _parse_composition(fields: str) -> dict[str, int]:
    """
    Parse the four 5-character element/count fields of a species card.

    The CHEMKIN electron symbol 'E' maps to the charge element 'e-'.
    """
    composition: dict[str, int] = {}
    for k in range(0, 20, 5):
        chunk = fields[k:k+5]
        symbol = chunk[0:2].strip()
        count_str = chunk[2:5].strip()
        if not symbol or not count_str:
            continue
        try:
            count = int(float(count_str))
        except ValueError:
            continue
        if count == 0:
            continue
        if symbol.upper() == 'E':
            symbol = ELECTRON_ELEMENT
        else:
            symbol = symbol.capitalize()
        composition[symbol] = composition.get(symbol, 0) + count
    return composition


def _parse_coefficient(field: str) -> float:
    """
    Parse a coefficient from NASA fixed-width format.

    Handles various exponential notation formats:
    - Standard: 1.234E+01
    - D notation: 1.234D+01 (Fortran)
    - No exponent letter: 1.234+01

    Raises:
        ValueError: If the field is not a number
    """
    field = field.strip()
    if not field:
        return 0.0

    field = field.replace('D', 'E').replace('d', 'e')

    if re.match(r'^-?\d+\.\d+[+-]\d+$', field):
        field = re.sub(r'([+-])(\d+)$', r'E\1\2', field)

    return float(field)

