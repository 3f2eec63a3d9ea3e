"""
Mission and user repositories.

Thin persistence boundary over a SQLAlchemy session:
get / list / insert / update / delete_where. Every write commits, so
each lifecycle operation is one read followed by one conditional write.
"""
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from ...models.db_models import MissionDB, UserDB


class _Repository:
    model = None

    def __init__(self, db: Session):
        self.db = db

    def get(self, entity_id: str):
        """Full-row read. Returns None when absent."""
        if not entity_id:
            return None
        return self.db.query(self.model).filter(self.model.id == entity_id).first()

    def list(self) -> List[Any]:
        return self.db.query(self.model).all()

    def insert(self, entity):
        self.db.add(entity)
        self.db.commit()
        self.db.refresh(entity)
        return entity

    def update(self, entity_id: str, changes: Dict[str, Any]):
        """
        Write `changes` onto the stored row and return it refreshed.

        Returns None when the row disappeared between read and write.
        """
        entity = self.get(entity_id)
        if entity is None:
            return None
        for name, value in changes.items():
            setattr(entity, name, value)
        self.db.commit()
        self.db.refresh(entity)
        return entity

    def delete_where(self, **criteria) -> int:
        """Delete every row whose columns equal `criteria`. Returns the count."""
        query = self.db.query(self.model)
        for name, value in criteria.items():
            query = query.filter(getattr(self.model, name) == value)
        count = query.delete(synchronize_session=False)
        self.db.commit()
        return count


class MissionRepository(_Repository):
    model = MissionDB

    def list(self) -> List[MissionDB]:
        return self.db.query(MissionDB).order_by(MissionDB.createdat).all()


class UserRepository(_Repository):
    model = UserDB

    def get_by_name(self, name: str) -> Optional[UserDB]:
        return self.db.query(UserDB).filter(UserDB.name == name).first()
