#!/usr/bin/env python3
"""Write the API's OpenAPI schema to disk (default: openapi.json next to this file).

Usage: python export_openapi.py [output_path]
"""

import json
import sys
from pathlib import Path

from app.main import app


def export_schema(output_path: Path) -> Path:
    schema = app.openapi()
    output_path.write_text(json.dumps(schema, indent=2, ensure_ascii=False), encoding="utf-8")
    return output_path


if __name__ == "__main__":
    target = Path(sys.argv[1]) if len(sys.argv) > 1 else Path(__file__).parent / "openapi.json"
    written = export_schema(target)
    print(f"OpenAPI schema ({len(app.openapi()['paths'])} paths) exported to: {written}")
