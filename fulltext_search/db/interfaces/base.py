from abc import ABC, abstractmethod
from typing import Any, ContextManager, Optional

from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session


class BaseDatabase(ABC):
    @abstractmethod
    def startup(self) -> None:
        pass

    @abstractmethod
    def teardown(self) -> None:
        pass

    @property
    @abstractmethod
    def engine(self) -> Engine:
        pass

    @abstractmethod
    def get_session(self) -> ContextManager[Session]:
        pass


class BaseRepository(ABC):
    def __init__(self, session: Session):
        self.session = session

    @abstractmethod
    def get(self, record_id: Any) -> Optional[Any]:
        """Get a record by its natural key."""

    @abstractmethod
    def delete(self, record_id: Any) -> bool:
        """Delete a record by its natural key."""
