import os
from pathlib import Path
from typing import List, Optional, Tuple


def _parse_env_line(line: str) -> Optional[Tuple[str, str]]:
    s = line.strip()
    if s.startswith("export "):
        s = s[len("export "):].lstrip()
    if not s or s.startswith("#") or "=" not in s:
        return None
    key, _, val = s.partition("=")
    key, val = key.strip(), val.strip()
    if len(val) >= 2 and val[0] == val[-1] and val[0] in "\"'":
        val = val[1:-1]
    return (key, val) if key else None


def load_env_file(path: Path = Path(".env")) -> List[str]:
    """Copy KEY=VALUE pairs from `path` into os.environ; returns the keys set.

    Variables already present in the environment are left alone.
    """
    try:
        lines = path.read_text(encoding="utf-8").splitlines()
    except OSError:
        return []
    applied: List[str] = []
    for line in lines:
        pair = _parse_env_line(line)
        if pair and pair[0] not in os.environ:
            os.environ[pair[0]] = pair[1]
            applied.append(pair[0])
    return applied


# Tests stay offline: never pick up a developer's real key
if not os.getenv("PYTEST_CURRENT_TEST"):
    load_env_file()
