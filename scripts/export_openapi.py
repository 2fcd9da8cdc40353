"""Write the OpenAPI document for the DevCamper API to disk.

Usage: python scripts/export_openapi.py [destination]
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from fastapi import FastAPI
from src.api.main import create_app

DEFAULT_DESTINATION = Path("docs/api/openapi.json")


def export_openapi(app: FastAPI, destination: Path) -> int:
    """Persist the schema and return the number of documented paths."""
    destination.parent.mkdir(parents=True, exist_ok=True)
    schema = app.openapi()
    destination.write_text(json.dumps(schema, indent=2, sort_keys=True))
    return len(schema.get("paths", {}))


def main() -> None:
    destination = Path(sys.argv[1]) if len(sys.argv) > 1 else DEFAULT_DESTINATION
    count = export_openapi(create_app(), destination)
    print(f"Wrote {count} paths to {destination}")


if __name__ == "__main__":
    main()
