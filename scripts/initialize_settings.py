#!/usr/bin/env python
"""Seed the singleton settings row with default values.

Run from the repository root:

        python ./scripts/initialize_settings.py

Values can be given through the same environment variables the app reads
(APP_MAX_TOURS_PER_STUDENT, APP_FILLING_FAST_THRESHOLD, APP_ANNOUNCEMENT); an existing
row is left untouched.
"""

import sys
import os

# Ensure project root is on sys.path so `import campus_tours` works when
# invoking this script as `python scripts/initialize_settings.py`
proj_root = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if proj_root not in sys.path:
    sys.path.insert(0, proj_root)

from campus_tours import create_app, db  # noqa: E402
from campus_tours.models.settings import (  # noqa: E402
    Settings,
    SETTINGS_ROW_ID,
    DEFAULT_ANNOUNCEMENT,
    DEFAULT_FILLING_FAST_THRESHOLD,
    DEFAULT_MAX_TOURS_PER_STUDENT,
)


def init_settings(config_name=None):
    """Create the settings row if it does not exist yet."""
    app = create_app(config_name or os.environ.get("FLASK_CONFIG", "production"))

    with app.app_context():
        print("[Settings Init] Starting initialization...")

        existing = Settings.get_row()
        if existing:
            print(f"  ✓ Settings row already exists (skipped): {existing!r}")
            return existing

        row = Settings(
            id=SETTINGS_ROW_ID,
            max_tours_per_student=int(
                os.environ.get("APP_MAX_TOURS_PER_STUDENT", DEFAULT_MAX_TOURS_PER_STUDENT)
            ),
            filling_fast_threshold=float(
                os.environ.get("APP_FILLING_FAST_THRESHOLD", DEFAULT_FILLING_FAST_THRESHOLD)
            ),
            announcement=os.environ.get("APP_ANNOUNCEMENT", DEFAULT_ANNOUNCEMENT),
        )
        db.session.add(row)
        db.session.commit()
        print(f"  ✓ Created settings row: {row!r}")
        return row


if __name__ == "__main__":
    init_settings()
