"""Conversion between in-memory tables and estimation records."""

from .frames import estimates_to_frame, manifest_to_frame, observations_from_frame
from .io import read_observations_csv, write_table_csv

__all__ = [
    "estimates_to_frame",
    "manifest_to_frame",
    "observations_from_frame",
    "read_observations_csv",
    "write_table_csv",
]
