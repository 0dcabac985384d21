from __future__ import annotations

import json
import re
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]

REQUIRED_FILES = {
    "supabase/migrations/20261001_001_trek_booking_core.sql": [
        r"CREATE TABLE IF NOT EXISTS public\.package_availability",
        r"UNIQUE \(package_id, available_date\)",
        r"CREATE OR REPLACE FUNCTION public\.book_package_date",
        r"CREATE OR REPLACE FUNCTION public\.create_booking_atomic",
        r"CREATE OR REPLACE FUNCTION public\.cancel_booking",
        r"CREATE OR REPLACE FUNCTION public\.log_user_activity",
        r"CREATE TRIGGER bookings_guard_status",
        r"FOR UPDATE;",
        r"current_bookings >= v_slot\.max_bookings",
    ],
}


def check_migrations(root: Path = ROOT) -> dict:
    missing_files: list[str] = []
    missing_patterns: dict[str, list[str]] = {}

    for rel_path, patterns in REQUIRED_FILES.items():
        target = root / rel_path
        if not target.exists():
            missing_files.append(rel_path)
            continue

        text = target.read_text(encoding="utf-8")
        for pattern in patterns:
            if not re.search(pattern, text, flags=re.IGNORECASE | re.MULTILINE):
                missing_patterns.setdefault(rel_path, []).append(pattern)

    return {
        "ok": not missing_files and not missing_patterns,
        "checked_files": len(REQUIRED_FILES),
        "missing_files": missing_files,
        "missing_patterns": missing_patterns,
    }


def main() -> int:
    result = check_migrations()
    print(json.dumps(result, indent=2))
    return 0 if result["ok"] else 1


if __name__ == "__main__":
    sys.exit(main())
