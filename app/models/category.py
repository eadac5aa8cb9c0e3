from app import db


class Category(db.Model):
    __tablename__ = 'categories'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False, unique=True)
    icon = db.Column(db.String(50))  # Chave do ícone no frontend
    color = db.Column(db.String(20))  # Hex, ex: #FF6B6B

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'icon': self.icon,
            'color': self.color,
        }

    def __repr__(self):
        return f'<Category {self.name}>'


# Categorias fixas do sistema (não são criadas por usuários)
DEFAULT_CATEGORIES = [
    (1, 'Pothole', 'road', '#FF6B6B'),
    (2, 'Street Light', 'lightbulb', '#4ECDC4'),
    (3, 'Graffiti', 'spray-can', '#45B7D1'),
    (4, 'Trash', 'trash', '#96CEB4'),
    (5, 'Traffic Sign', 'traffic-cone', '#F39C12'),
    (6, 'Water/Sewer', 'droplet', '#3498DB'),
    (7, 'Parks/Recreation', 'tree', '#27AE60'),
    (8, 'Other', 'alert-circle', '#FECA57'),
]


def seed_categories():
    """Insere as categorias padrão que ainda não existem. Retorna quantas foram criadas"""
    created = 0
    for category_id, name, icon, color in DEFAULT_CATEGORIES:
        if db.session.get(Category, category_id) is None:
            db.session.add(Category(id=category_id, name=name, icon=icon, color=color))
            created += 1
    if created:
        db.session.commit()
    return created
