"""
Ingredient Model

Contains the Ingredient catalog record. Catalog entries have no owner and are
never shared with recipes: attaching one to a recipe copies it.
"""

from .base import db, fresh_id


class Ingredient(db.Model):
    """Catalog ingredient. Names are stored lowercase; duplicates are allowed."""
    id = db.Column(db.String(32), primary_key=True, default=fresh_id)
    name = db.Column(db.String(200), nullable=False, index=True)
    quantity = db.Column(db.Float, nullable=False, default=0.0)
    unit = db.Column(db.String(50), nullable=False, default='')

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'quantity': self.quantity,
            'unit': self.unit,
        }

    def __repr__(self):
        return f'<Ingredient {self.id} {self.quantity:g} {self.unit} {self.name}>'
