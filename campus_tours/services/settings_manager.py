"""Settings manager for the booking desk knobs (ENV > DB > defaults)."""

import os
from dataclasses import dataclass
from typing import Any, Optional

from flask import current_app

from campus_tours.services.exceptions import ValidationError


@dataclass(frozen=True)
class TourSettings:
    """Immutable snapshot of the global settings.

    Passed explicitly to status derivation instead of being read from
    global state inside it.
    """

    max_tours_per_student: int
    filling_fast_threshold: float
    announcement: str


class SettingsManager:
    """
    Hierarchical lookup for the singleton settings row.

    Priority order:
    1. Environment variable (APP_{KEY_UPPER}); a key set here is locked
    2. Database value from the ``settings`` row
    3. Default value

    The row is read on every call; there is no cache, so an admin change is
    visible to the very next status computation.
    """

    # key -> data_type
    FIELDS = {
        "max_tours_per_student": "integer",
        "filling_fast_threshold": "float",
        "announcement": "string",
    }

    @classmethod
    def defaults(cls) -> TourSettings:
        from campus_tours.models.settings import (
            DEFAULT_ANNOUNCEMENT,
            DEFAULT_FILLING_FAST_THRESHOLD,
            DEFAULT_MAX_TOURS_PER_STUDENT,
        )

        return TourSettings(
            max_tours_per_student=DEFAULT_MAX_TOURS_PER_STUDENT,
            filling_fast_threshold=DEFAULT_FILLING_FAST_THRESHOLD,
            announcement=DEFAULT_ANNOUNCEMENT,
        )

    @classmethod
    def get(cls) -> TourSettings:
        """
        Resolve the effective settings.

        Returns:
            TourSettings built from ENV, the settings row, or defaults
        """
        from campus_tours.models.settings import Settings

        defaults = cls.defaults()
        row = Settings.get_row()

        values = {}
        for key, data_type in cls.FIELDS.items():
            env_value = os.environ.get(cls._env_key_for(key))
            if env_value is not None:
                try:
                    values[key] = cls._parse_value(env_value, data_type)
                    continue
                except ValueError as e:
                    current_app.logger.warning(
                        f"[settings] Ignoring invalid {cls._env_key_for(key)}={env_value!r}: {e}"
                    )

            db_value = getattr(row, key, None) if row is not None else None
            values[key] = db_value if db_value is not None else getattr(defaults, key)

        return TourSettings(**values)

    @classmethod
    def locked_keys(cls) -> list:
        """Keys currently pinned by an environment variable."""
        return [
            key for key in cls.FIELDS if os.environ.get(cls._env_key_for(key)) is not None
        ]

    @classmethod
    def update(cls, changes: dict, user_id: Optional[Any] = None) -> TourSettings:
        """
        Apply a partial update to the settings row.

        Keys whose value is None are left unchanged (COALESCE semantics).

        Raises:
            ValidationError: unknown key, key locked by ENV, or invalid value
            RuntimeError: if the DB write fails
        """
        from campus_tours import db
        from campus_tours.models.settings import Settings, SETTINGS_ROW_ID

        pending = {k: v for k, v in (changes or {}).items() if v is not None}

        for key, value in pending.items():
            if key not in cls.FIELDS:
                raise ValidationError(f"Setting '{key}' does not exist")
            env_key = cls._env_key_for(key)
            if os.environ.get(env_key) is not None:
                raise ValidationError(
                    f"Setting '{key}' is locked by environment variable '{env_key}'"
                )
            pending[key] = cls._validate_value(key, value)

        if not pending:
            return cls.get()

        try:
            row = Settings.get_row()
            if row is None:
                defaults = cls.defaults()
                row = Settings(
                    id=SETTINGS_ROW_ID,
                    max_tours_per_student=defaults.max_tours_per_student,
                    filling_fast_threshold=defaults.filling_fast_threshold,
                    announcement=defaults.announcement,
                )
                db.session.add(row)
            for key, value in pending.items():
                setattr(row, key, value)
            db.session.commit()
        except Exception as e:
            db.session.rollback()
            raise RuntimeError(f"Failed to update settings: {e}")

        current_app.logger.info(
            f"[settings] Updated {sorted(pending)} by user {user_id}"
        )
        return cls.get()

    @classmethod
    def _env_key_for(cls, key: str) -> str:
        return f"APP_{key.upper()}"

    @classmethod
    def _parse_value(cls, value: str, data_type: str) -> Any:
        """Parse string value to appropriate Python type."""
        if data_type == "integer":
            return int(value)
        elif data_type == "float":
            return float(value)
        else:  # string
            return str(value)

    @classmethod
    def _validate_value(cls, key: str, value: Any) -> Any:
        """Validate and coerce a value before storing it."""
        data_type = cls.FIELDS[key]

        if data_type == "integer":
            if isinstance(value, bool):
                raise ValidationError(f"{key} must be a positive integer")
            try:
                parsed = int(value)
            except (ValueError, TypeError):
                raise ValidationError(f"{key} must be a positive integer")
            if isinstance(value, float) and value != parsed:
                raise ValidationError(f"{key} must be a positive integer")
            if parsed < 1:
                raise ValidationError(f"{key} must be a positive integer")
            return parsed

        if data_type == "float":
            if isinstance(value, bool):
                raise ValidationError(f"{key} must be a number between 0 and 1")
            try:
                parsed = float(value)
            except (ValueError, TypeError):
                raise ValidationError(f"{key} must be a number between 0 and 1")
            if not (0 < parsed <= 1):
                raise ValidationError(f"{key} must be a number between 0 and 1")
            return parsed

        if not isinstance(value, str):
            raise ValidationError(f"{key} must be a string")
        return value
