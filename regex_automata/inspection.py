"""Write compiled clauses to a file so the generated regex can be read."""

import json
from datetime import datetime
from pathlib import Path
from typing import Dict, Optional

from .pattern import AggregatePattern

INSPECTION_FILENAME = "mega_regex.txt"


def inspection_lines(pattern: AggregatePattern, example: Optional[str] = None):
    """Clause per line, aligned, each annotated with the rule it came from."""
    width = max((len(c.pattern) for c in pattern.clauses), default=0)
    yield "Regex Clauses:"
    for clause in pattern.clauses:
        yield f"{clause.pattern.ljust(width + 3)} # {clause.source}"
    yield ""
    yield "Replace Regex:"
    yield pattern.template
    if example is not None:
        yield ""
        yield "Initial Tape:"
        yield example


def inspection_dict(pattern: AggregatePattern, example: Optional[str] = None) -> Dict:
    return {
        "version": "1.0",
        "generated_at": datetime.now().isoformat(),
        "clauses": [
            {"pattern": c.pattern, "source": c.source, "captures": list(c.captures)}
            for c in pattern.clauses
        ],
        "template": pattern.template,
        "example": example,
    }


def write_inspection(
    pattern: AggregatePattern,
    filepath: str = INSPECTION_FILENAME,
    example: Optional[str] = None,
    fmt: str = "text",
) -> Path:
    """Save the pattern as aligned text (default) or JSON."""
    path = Path(filepath)
    path.parent.mkdir(parents=True, exist_ok=True)
    if fmt == "json":
        with open(path, "w") as f:
            json.dump(inspection_dict(pattern, example), f, indent=2)
    elif fmt == "text":
        with open(path, "w") as f:
            for line in inspection_lines(pattern, example):
                f.write(line + "\n")
    else:
        raise ValueError(f"Unknown inspection format {fmt!r}")
    return path
