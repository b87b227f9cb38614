"""Singleton settings row read by every tour-status computation."""

from campus_tours import db


SETTINGS_ROW_ID = 1

DEFAULT_MAX_TOURS_PER_STUDENT = 2
DEFAULT_FILLING_FAST_THRESHOLD = 0.25
DEFAULT_ANNOUNCEMENT = ""


class Settings(db.Model):
    """
    Global knobs for the booking desk.

    Only the row with ``id == SETTINGS_ROW_ID`` is ever read or written.

    Attributes:
        max_tours_per_student: Distinct tours a student may hold at once (>= 1)
        filling_fast_threshold: Remaining-capacity fraction in (0, 1] below
            which a tour is shown as filling fast
        announcement: Free text shown on the display board
    """

    __tablename__ = "settings"

    id = db.Column(db.Integer, primary_key=True)
    max_tours_per_student = db.Column(
        db.Integer, nullable=False, default=DEFAULT_MAX_TOURS_PER_STUDENT
    )
    filling_fast_threshold = db.Column(
        db.Float, nullable=False, default=DEFAULT_FILLING_FAST_THRESHOLD
    )
    announcement = db.Column(db.Text, nullable=False, default=DEFAULT_ANNOUNCEMENT)
    updated_at = db.Column(
        db.DateTime, server_default=db.func.now(), onupdate=db.func.now(), nullable=False
    )

    def __repr__(self):
        return (
            f"<Settings max_tours={self.max_tours_per_student} "
            f"threshold={self.filling_fast_threshold}>"
        )

    @classmethod
    def get_row(cls):
        """Return the singleton row, or None if it was never seeded."""
        return db.session.get(cls, SETTINGS_ROW_ID)
