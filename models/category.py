from common.database import db, BaseModel

class Category(BaseModel):
    __tablename__ = 'categories'

    category_id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    name        = db.Column(db.String(100), nullable=False, unique=True)
    description = db.Column(db.Text, nullable=True)

    @classmethod
    def get_by_name(cls, name):
        return cls.query.filter_by(name=name).first()

    def serialize(self):
        """Return object data in easily serializable format"""
        return {
            'category_id': self.category_id,
            'name': self.name,
            'description': self.description
        }
