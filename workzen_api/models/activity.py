from datetime import datetime
from workzen_api.extensions import db

class ActivityLog(db.Model):
    __tablename__ = "activity_logs"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    user_name = db.Column(db.String(255))
    user_role = db.Column(db.String(50))
    action = db.Column(db.String(20), nullable=False)   # GENERATE|UPDATE|DELETE|CREATE
    module = db.Column(db.String(50), nullable=False)   # Payroll, SALARY_COMPONENT, ...
    details = db.Column(db.Text)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow, index=True)
