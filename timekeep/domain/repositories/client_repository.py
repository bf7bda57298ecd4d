"""
Client repository interface.
Defines the contract for client data persistence operations.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from timekeep.domain.models.client import Client


class ClientRepository(ABC):
    """
    Repository interface for Client entity.
    """

    @abstractmethod
    async def get(self, client_id: str) -> Optional[Client]:
        """
        Find a client by its ID.
        Returns None if not found.
        """
        pass

    @abstractmethod
    async def list_all(self) -> List[Client]:
        """
        List all clients ordered by name.
        """
        pass

    @abstractmethod
    async def add(self, client: Client) -> Client:
        """
        Persist a new client.
        """
        pass

    @abstractmethod
    async def update(self, client: Client) -> Client:
        """
        Persist changes to an existing client.
        """
        pass

    @abstractmethod
    async def delete(self, client_id: str) -> bool:
        """
        Delete a client.
        Returns True if deleted, False if not found.
        """
        pass
