from workzen_api import create_app
from workzen_api.extensions import db
from workzen_api.models.user import User
from workzen_api.models.security import Role, UserRole

app = create_app()

with app.app_context():
    email = "admin@workzen.local"
    password = "password"

    u = User.query.filter_by(email=email).first()
    if not u:
        print(f"Creating user {email}...")
        u = User(email=email, full_name="Admin User", status="active")
        u.set_password(password)
        db.session.add(u)
        db.session.flush()
    else:
        print(f"User {email} already exists. Resetting password...")
        u.set_password(password)

    # Assign admin role
    admin_role = Role.query.filter_by(code="admin").first()
    if not admin_role:
        admin_role = Role(code="admin")
        db.session.add(admin_role)
        db.session.flush()
    has_role = UserRole.query.filter_by(user_id=u.id, role_id=admin_role.id).first()
    if not has_role:
        print("Assigning admin role...")
        db.session.add(UserRole(user_id=u.id, role_id=admin_role.id))

    db.session.commit()
    print("Admin user ready.")
