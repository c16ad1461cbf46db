"""Shared type aliases."""

from pathlib import Path
from typing import Any, Dict, Union

PathLike = Union[str, Path]

# Decoded JSON object as sent to / received from the job API
JsonDict = Dict[str, Any]
