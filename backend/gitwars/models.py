from gitwars import db
from sqlalchemy import func


class Document(db.Model):
    __tablename__ = 'document'
    id = db.Column(db.Integer, primary_key=True)
    collection = db.Column(db.String(64), nullable=False, index=True)
    doc_id = db.Column(db.String(128), nullable=False)
    data = db.Column(db.JSON, nullable=False, default=dict)
    __table_args__ = (db.UniqueConstraint('collection', 'doc_id', name='uq_document_path'),)

    @property
    def path(self):
        return f"{self.collection}/{self.doc_id}"


def next_team_number():
    """Next free team number: one past the highest in use."""
    highest = db.session.query(func.max(Team.team_number)).scalar()
    return (highest or 0) + 1


class Team(db.Model):
    __tablename__ = 'team'
    id = db.Column(db.Integer, primary_key=True)
    team_number = db.Column(db.Integer, unique=True, nullable=False, index=True)
    team_name = db.Column(db.String(64), nullable=False)
    score = db.Column(db.Integer, default=0, nullable=False)
    shields = db.Column(db.Integer, default=0, nullable=False)
    team_class = db.Column(db.Integer, nullable=True)
    role = db.Column(db.String(32), nullable=True)

    def __init__(self, **kwargs):
        super(Team, self).__init__(**kwargs)
        if self.team_number is None:
            self.team_number = next_team_number()
        if self.score is None:
            self.score = 0
        if self.shields is None:
            self.shields = 0

    def to_dict(self):
        return {
            'id': self.id,
            'teamNumber': self.team_number,
            'teamName': self.team_name,
            'score': self.score,
            'shields': self.shields,
            'class': self.team_class,
            'role': self.role,
        }
