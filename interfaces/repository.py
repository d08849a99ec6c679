"""
Collaborator Interfaces

Contracts between the pathways workflow and its external collaborators:
topic publish/subscribe, the pathway_versions store, and the claims
service. Services depend on these, never on Azure or psycopg directly,
so tests can substitute in-memory implementations.
"""

from abc import ABC, abstractmethod
from contextlib import AbstractContextManager
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Set
import threading

from pydantic import BaseModel

from config.defaults import DatabaseDefaults


class IMessagePublisher(ABC):
    """
    Outbound topic channel.

    Implementations own retries and transport errors; a send that still
    fails raises exceptions.ServiceBusError.
    """

    @abstractmethod
    def publish(self, message: BaseModel) -> str:
        """
        Publish a message to the bound topic.

        Args:
            message: Pydantic model (serialized by alias to JSON)

        Returns:
            Message ID
        """
        pass


class IMessageSubscriber(ABC):
    """
    Inbound topic subscription modelled as a blocking pull loop.

    One handler invocation = one message. The message is completed when the
    handler returns and abandoned (for redelivery) when it raises.
    """

    @abstractmethod
    def run(self, handler: Callable[[str], Any], stop_event: threading.Event) -> int:
        """
        Receive and dispatch messages until stop_event is set.

        Returns:
            Number of messages dispatched
        """
        pass


class IPathwayVersionUnitOfWork(ABC):
    """
    One open store transaction.

    Queries are core.schema.pathways_sql.PreparedQuery instances, always
    parameterized.
    """

    schema: str

    @abstractmethod
    def lock_scope(self, project_group_id: str, station_id: str) -> None:
        """Serialize admissions for one scope until the transaction ends."""
        pass

    @abstractmethod
    def execute_query(self, query) -> List[Dict[str, Any]]:
        """Run a SELECT and return rows as dicts."""
        pass

    @abstractmethod
    def execute_insert(self, query) -> int:
        """
        Run an INSERT and return the affected row count.

        Raises:
            IntegrityConflictError: Unique or exclusion constraint violated
        """
        pass


class IPathwayVersionStore(ABC):
    """Transactional store for pathway_versions."""

    @abstractmethod
    def transaction(self) -> AbstractContextManager:
        """
        Open a unit of work.

        Commits on normal exit and rolls back when the block raises.
        Constraint violations surfacing at commit raise
        IntegrityConflictError.
        """
        pass

    @abstractmethod
    def get_version(self, record_id: str) -> Optional[Dict[str, Any]]:
        pass

    @abstractmethod
    def list_versions(
        self,
        project_group_id: Optional[str] = None,
        station_id: Optional[str] = None,
        valid_at: Optional[datetime] = None,
        page_no: int = 1,
        page_size: int = DatabaseDefaults.PAGE_SIZE
    ) -> List[Dict[str, Any]]:
        """Filtered page of versions, newest valid_from first."""
        pass


class IRoleResolver(ABC):
    """Claims collaborator."""

    @abstractmethod
    def resolve_roles(self, user_id: Optional[str], project_group_id: Optional[str]) -> Set[str]:
        """
        Role names held by user_id within project_group_id.

        Raises:
            RoleResolutionError: Claims service unreachable or bad response
        """
        pass
