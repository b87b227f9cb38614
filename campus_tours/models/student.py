import uuid

from campus_tours import db


class Student(db.Model):
    __tablename__ = 'students'

    id = db.Column(db.String(36), primary_key=True,
                   default=lambda: str(uuid.uuid4()))
    name = db.Column(db.String(150), nullable=False)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    # Campus-issued identifier, distinct from the primary key
    student_id = db.Column(db.String(64), nullable=False)
    created_at = db.Column(
        db.DateTime, server_default=db.func.now(), nullable=False)
    updated_at = db.Column(db.DateTime, server_default=db.func.now(
    ), onupdate=db.func.now(), nullable=False)

    registrations = db.relationship(
        'Registration', back_populates='student', lazy=True)

    def __repr__(self):
        return f'<Student {self.email}>'
