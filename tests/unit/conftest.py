"""Shared fixtures for the unit tests."""

import pytest

from aerochem.core.constants import ELECTRON_ELEMENT


def format_nasa7_card(data) -> str:
    """NASA7Data as a 4-line fixed-width thermo card."""
    elements = ""
    for symbol, count in list(data.composition.items())[:4]:
        tag = "E" if symbol == ELECTRON_ELEMENT else symbol
        elements += f"{tag:<2}{count:>3d}"
    elements = elements.ljust(20)

    line1 = (
        f"{data.name:<18}{'':6}{elements}{data.phase[0]}"
        f"{data.t_low:10.3f}{data.t_high:10.3f}{data.t_mid:8.2f}"
    ).ljust(79) + "1"

    c = list(data.coeffs_high) + list(data.coeffs_low)
    line2 = "".join(f"{v:15.8E}" for v in c[0:5]).ljust(79) + "2"
    line3 = "".join(f"{v:15.8E}" for v in c[5:10]).ljust(79) + "3"
    line4 = "".join(f"{v:15.8E}" for v in c[10:14]).ljust(79) + "4"
    return "\n".join([line1, line2, line3, line4])


@pytest.fixture
def nasa7_card():
    return format_nasa7_card
