"""Utility modules - chemistry databases and thermo file parsing."""

from .nasa_parser import (
    NASAParserError,
    parse_nasa_file,
    parse_nasa7_text,
)
from .database import ChemistryDatabase, mechanism_from_dict, sample_database

__all__ = [
    "NASAParserError",
    "parse_nasa_file",
    "parse_nasa7_text",
    "ChemistryDatabase",
    "mechanism_from_dict",
    "sample_database",
]
