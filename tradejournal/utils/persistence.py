"""
JSON persistence utilities.

The trade journal is kept as a single JSON document on disk.  This
module provides the load/save helpers the repository builds on;
writes go through a temporary file so a crash never leaves a
half-written journal behind.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Dict, Optional


def load_document(path: str) -> Optional[Dict[str, Any]]:
    """Load a JSON document.

    Parameters
    ----------
    path : str
        Path to the JSON file.

    Returns
    -------
    dict or None
        The parsed document if the file exists, otherwise `None`.
    """
    file_path = Path(path)
    if not file_path.exists():
        return None
    with file_path.open("r", encoding="utf-8") as fh:
        return json.load(fh)


def save_document(path: str, document: Dict[str, Any]) -> None:
    """Write a JSON document to disk, replacing any previous version.

    Parameters
    ----------
    path : str
        Path to the output file.
    document : dict
        Must be serialisable to JSON.
    """
    file_path = Path(path)
    file_path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = file_path.with_name(file_path.name + ".tmp")
    with tmp_path.open("w", encoding="utf-8") as fh:
        json.dump(document, fh, ensure_ascii=False, indent=2)
    os.replace(tmp_path, file_path)
