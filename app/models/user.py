from app import db
from flask_login import UserMixin
from datetime import datetime
import bcrypt

ROLE_CITIZEN = 'citizen'
ROLE_STAFF = 'staff'
ROLE_ADMIN = 'admin'


class User(UserMixin, db.Model):
    __tablename__ = 'users'

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(120), unique=True, nullable=False)
    full_name = db.Column(db.String(100))
    password_hash = db.Column(db.String(128))
    role = db.Column(db.String(20), nullable=False, default=ROLE_CITIZEN)  # citizen, staff, admin
    is_blocked = db.Column(db.Boolean, default=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    last_login_at = db.Column(db.DateTime)

    # Relacionamentos
    reports = db.relationship('Report', backref='user', lazy='dynamic', passive_deletes=True)

    @property
    def is_staff(self):
        return self.role in (ROLE_STAFF, ROLE_ADMIN)

    @property
    def display_name(self):
        return self.full_name or self.email

    def set_password(self, password):
        self.password_hash = bcrypt.hashpw(password.encode('utf-8'), bcrypt.gensalt()).decode('utf-8')

    def check_password(self, password):
        if not self.password_hash or not password:
            return False
        try:
            return bcrypt.checkpw(password.encode('utf-8'), self.password_hash.encode('utf-8'))
        except ValueError:
            return False

    def update_last_login(self):
        self.last_login_at = datetime.utcnow()

    def to_dict(self):
        return {
            'id': self.id,
            'email': self.email,
            'fullName': self.full_name,
            'role': self.role,
            'createdAt': self.created_at.isoformat() if self.created_at else None,
            'lastLoginAt': self.last_login_at.isoformat() if self.last_login_at else None,
        }

    def __repr__(self):
        return f'<User {self.email}>'
