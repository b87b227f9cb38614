import uuid
from datetime import datetime, timezone

from campus_tours import db


def _utcnow():
    return datetime.now(timezone.utc).replace(tzinfo=None)


class Registration(db.Model):
    __tablename__ = 'registrations'

    id = db.Column(db.String(36), primary_key=True,
                   default=lambda: str(uuid.uuid4()))
    student_id = db.Column(db.String(36), db.ForeignKey(
        'students.id'), nullable=False, index=True)
    tour_id = db.Column(db.String(36), db.ForeignKey(
        'tours.id'), nullable=False, index=True)
    code = db.Column(db.String(12), nullable=False, index=True)
    checked_in = db.Column(db.Boolean, nullable=False, default=False)
    # Set in Python so ordering by created_at is stable within one second
    created_at = db.Column(db.DateTime, nullable=False, default=_utcnow)

    student = db.relationship('Student', back_populates='registrations')
    tour = db.relationship('Tour', back_populates='registrations')

    # One seat per student per tour
    __table_args__ = (db.UniqueConstraint(
        'student_id', 'tour_id', name='unique_student_tour'),)

    def __repr__(self):
        return f'<Registration {self.code} Student:{self.student_id} Tour:{self.tour_id}>'
