"""
Reading the versioned save-service properties resource.

The resource is a ``key=value`` file. Keys starting with an underscore are
directives (``_version`` is the property version); every other key is a class
alias mapped to an importable ``module.ClassName`` path.
"""
import hashlib
from pathlib import Path
from typing import Dict, List, Tuple, Union

from jmxroundtrip.exceptions import FixtureAccessError

VERSION_KEY = "_version"
COMMENT_PREFIXES = ("#", "!")


def read_lines(path: Union[str, Path], encoding: str = "utf-8") -> List[str]:
    """Return the resource's lines without terminators.

    Raises:
        FixtureAccessError: If the resource cannot be read
    """
    path = Path(path)
    try:
        with open(path, "r", encoding=encoding, newline=None) as handle:
            return [line.rstrip("\n") for line in handle]
    except (OSError, UnicodeDecodeError) as e:
        raise FixtureAccessError(
            f"Cannot read properties resource {path}: {e}",
            error_code="FIXTURE_001",
            context={"file_path": path},
        ) from e


def _split_entry(line: str) -> Tuple[str, str]:
    separators = [index for index in (line.find("="), line.find(":")) if index >= 0]
    if not separators:
        return line.strip(), ""
    split_at = min(separators)
    return line[:split_at].strip(), line[split_at + 1:].strip()


def parse_properties(lines: List[str]) -> Dict[str, str]:
    """Parse ``key=value`` / ``key: value`` lines, honoring ``\\`` continuations."""
    properties: Dict[str, str] = {}
    pending = ""
    for raw in lines:
        line = pending + raw.strip() if pending else raw.strip()
        pending = ""
        if not line or line.startswith(COMMENT_PREFIXES):
            continue
        if line.endswith("\\"):
            pending = line[:-1]
            continue

        key, value = _split_entry(line)
        properties[key] = value

    if pending:
        key, value = _split_entry(pending)
        properties[key] = value
    return properties


def fingerprint_lines(lines: List[str], encoding: str = "utf-8") -> str:
    """SHA-1 hex digest of the lines concatenated without line terminators."""
    digest = hashlib.sha1()
    for line in lines:
        digest.update(line.encode(encoding))
    return digest.hexdigest()


def class_aliases(properties: Dict[str, str]) -> Dict[str, str]:
    """The alias-to-class entries, directives excluded."""
    return {key: value for key, value in properties.items() if not key.startswith("_")}
