# inventory/database/base_repository.py
# Provides a simplified base class for repositories backed by the DatabaseGateway.

from typing import Optional

from sqlalchemy.engine import Engine

from .gateway import DatabaseGateway
from inventory.utils.logger import logger


class BaseRepository:
    """
    Base class for data repositories.
    Holds the engine and the gateway every statement is dispatched through.
    """

    def __init__(self, engine: Engine, gateway: Optional[DatabaseGateway] = None):
        """
        Initializes the BaseRepository.

        Args:
            engine: The SQLAlchemy Engine instance.
            gateway: Optional pre-built gateway (shared between repositories or replaced in tests).
        """
        if not isinstance(engine, Engine):
            raise TypeError("engine must be an instance of sqlalchemy.engine.Engine")
        self.engine = engine
        self.gateway = gateway if gateway is not None else DatabaseGateway(engine)
        logger.debug(f"{self.__class__.__name__} initialized with SQLAlchemy engine: {engine.url.database}")
