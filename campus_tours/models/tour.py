import uuid

from campus_tours import db


STATUS_OVERRIDES = ('available', 'filling-fast')


class Tour(db.Model):
    __tablename__ = 'tours'

    id = db.Column(db.String(36), primary_key=True,
                   default=lambda: str(uuid.uuid4()))
    name = db.Column(db.String(150), nullable=False)
    start_time = db.Column(db.DateTime, nullable=False, index=True)
    end_time = db.Column(db.DateTime, nullable=False)
    capacity = db.Column(db.Integer, nullable=False)
    # Counters are only moved by the registration ledger (see
    # services.registration_service), never assigned from request payloads.
    registered = db.Column(db.Integer, nullable=False, default=0)
    checked_in = db.Column(db.Integer, nullable=False, default=0)
    status_override = db.Column(db.String(20), nullable=True)
    paused = db.Column(db.Boolean, nullable=False, default=False)
    canceled = db.Column(db.Boolean, nullable=False, default=False)
    created_at = db.Column(
        db.DateTime, server_default=db.func.now(), nullable=False)
    updated_at = db.Column(db.DateTime, server_default=db.func.now(
    ), onupdate=db.func.now(), nullable=False)

    registrations = db.relationship(
        'Registration', back_populates='tour', lazy=True, cascade='all, delete-orphan')

    __table_args__ = (
        db.CheckConstraint('capacity >= 1', name='ck_tours_capacity_positive'),
        db.CheckConstraint('registered >= 0 AND registered <= capacity',
                           name='ck_tours_registered_within_capacity'),
        db.CheckConstraint('checked_in >= 0 AND checked_in <= registered',
                           name='ck_tours_checked_in_within_registered'),
    )

    def __repr__(self):
        return f'<Tour {self.name} {self.registered}/{self.capacity}>'

    @property
    def remaining(self):
        return max((self.capacity or 0) - (self.registered or 0), 0)
