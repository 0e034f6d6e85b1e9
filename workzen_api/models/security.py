# workzen_api/models/security.py
from workzen_api.extensions import db

ROLE_CODES = ("admin", "hr", "payroll", "employee")


class Role(db.Model):
    __tablename__ = "roles"
    id   = db.Column(db.Integer, primary_key=True)
    code = db.Column(db.String(50), unique=True, nullable=False)  # admin | hr | payroll | employee

    users = db.relationship(
        "UserRole",
        back_populates="role",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<Role id={self.id} code={self.code!r}>"


class UserRole(db.Model):
    __tablename__ = "user_roles"
    user_id = db.Column(
        db.Integer,
        db.ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
    )
    role_id = db.Column(
        db.Integer,
        db.ForeignKey("roles.id", ondelete="CASCADE"),
        primary_key=True,
    )

    role = db.relationship("Role", back_populates="users")
    user = db.relationship(
        "User",
        backref=db.backref(
            "user_roles",
            cascade="all, delete-orphan",
            passive_deletes=True,
        ),
    )

    def __repr__(self) -> str:
        return f"<UserRole user_id={self.user_id} role_id={self.role_id}>"
