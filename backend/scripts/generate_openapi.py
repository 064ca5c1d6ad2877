#!/usr/bin/env python
"""
Generate the OpenAPI schema for the SLA Guard API.

Usage:
    python backend/scripts/generate_openapi.py [output.json]
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
sys.path.append(str(ROOT / "src"))

from slaguard.main import app  # noqa: E402


def main() -> None:
    schema = app.openapi()
    default_path = ROOT / "docs" / "openapi-schema.json"
    output_path = Path(sys.argv[1]) if len(sys.argv) > 1 else default_path
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(json.dumps(schema, indent=2))
    print(f"Wrote OpenAPI schema to {output_path}")


if __name__ == "__main__":
    main()
