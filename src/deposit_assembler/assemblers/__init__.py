"""Assemblers that turn submissions into package streams."""

from .assembler import Assembler, sanitize_filename
from .nihms_assembler import (
    APPLICATION_GZIP,
    SPEC_NIHMS_NATIVE_2017_07,
    NihmsAssembler,
    name_package,
)

__all__ = [
    "APPLICATION_GZIP",
    "Assembler",
    "NihmsAssembler",
    "SPEC_NIHMS_NATIVE_2017_07",
    "name_package",
    "sanitize_filename",
]
