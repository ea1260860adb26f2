from abc import ABC

from fastapi.encoders import jsonable_encoder
from sqlalchemy.orm import Session


class BaseRepository(ABC):
    def __init__(self, session: Session):
        self.session = session

    def _add(self, entity):
        """Stage the entity and flush so constraint violations surface at the call site."""
        self.session.add(entity)
        self.session.flush()
        return entity

    def _encode(self, payload: dict) -> dict:
        """
        Ensure JSON columns never receive:
        - datetime / date / time
        - Decimal / UUID
        """
        return jsonable_encoder(payload)
