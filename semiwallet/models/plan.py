from semiwallet.extensions import db
from semiwallet.utils import utcnow


class Plan(db.Model):
    __tablename__ = "plans"

    id = db.Column(db.Integer, primary_key=True)
    code = db.Column(db.String(32), unique=True, nullable=False, index=True)
    name = db.Column(db.String(100), nullable=False)
    price = db.Column(db.Numeric(10, 2), nullable=False)
    duration = db.Column(db.Integer, nullable=False)  # months
    duration_days = db.Column(db.Integer, nullable=False)
    save_percentage = db.Column(db.Integer, nullable=False, default=0)
    created_at = db.Column(db.DateTime, default=utcnow, nullable=False)

    def to_dict(self):
        return {
            "id": self.id,
            "code": self.code,
            "name": self.name,
            "price": float(self.price),
            "duration": self.duration,
            "duration_days": self.duration_days,
            "save_percentage": self.save_percentage,
        }

    def __repr__(self):
        return f"<Plan {self.code}>"
