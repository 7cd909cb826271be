from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Union


def load_parameter_file(path: Union[str, Path]) -> Dict[str, Any]:
    """
    Load raw run inputs from a JSON file (same field names as the dashboard form).
    A top-level {"type": "run", "params": {...}} envelope is unwrapped.
    """
    with open(path, "r", encoding="utf-8") as fh:
        data = json.load(fh)
    if not isinstance(data, dict):
        raise ValueError(f"Expected a JSON object in {path}, got {type(data).__name__}.")
    if data.get("type") == "run" and isinstance(data.get("params"), dict):
        return data["params"]
    return data
