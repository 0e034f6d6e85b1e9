from datetime import datetime
from workzen_api.extensions import db

ATTENDANCE_STATUSES = ("present", "absent", "half_day", "leave")

class Attendance(db.Model):
    __tablename__ = "attendance"

    id = db.Column(db.Integer, primary_key=True)
    employee_id = db.Column(db.Integer, db.ForeignKey("employees.id", ondelete="CASCADE"), nullable=False, index=True)
    date        = db.Column(db.Date, nullable=False)
    status      = db.Column(db.String(16), nullable=False, default="present")  # present|absent|half_day|leave
    check_in    = db.Column(db.DateTime, nullable=True)
    check_out   = db.Column(db.DateTime, nullable=True)
    created_at  = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    __table_args__ = (
        db.UniqueConstraint("employee_id", "date", name="uq_attendance_employee_date"),
    )

    employee = db.relationship("Employee")
