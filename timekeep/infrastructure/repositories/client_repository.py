"""
Client repository implementation using SQLAlchemy.
"""

from typing import List, Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from timekeep.domain.models.base import EntityNotFoundError
from timekeep.domain.models.client import Client
from timekeep.domain.repositories.client_repository import ClientRepository as ClientRepositoryInterface
from timekeep.infrastructure.db.models import ClientModel
from timekeep.infrastructure.mappers.client_mapper import ClientMapper
from timekeep.infrastructure.repositories.base import is_valid_id, store_errors


class SQLAlchemyClientRepository(ClientRepositoryInterface):
    """SQLAlchemy implementation of client repository."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.mapper = ClientMapper()

    @store_errors
    async def get(self, client_id: str) -> Optional[Client]:
        """Get client by ID."""
        if not is_valid_id(client_id):
            return None
        model = await self.session.get(ClientModel, client_id)
        if not model:
            return None
        return self.mapper.model_to_domain(model)

    @store_errors
    async def list_all(self) -> List[Client]:
        """Get all clients ordered by name."""
        result = await self.session.execute(select(ClientModel).order_by(ClientModel.name))
        return [self.mapper.model_to_domain(model) for model in result.scalars()]

    @store_errors
    async def add(self, client: Client) -> Client:
        """Insert a new client."""
        model = self.mapper.domain_to_model(client)
        self.session.add(model)
        await self.session.flush()

        client.id = str(model.id)
        return client

    @store_errors
    async def update(self, client: Client) -> Client:
        """Save changes to an existing client."""
        model = await self.session.get(ClientModel, client.id)
        if not model:
            raise EntityNotFoundError("Client", client.id)

        model.name = client.name
        model.updated_at = client.updated_at
        await self.session.flush()
        return client

    @store_errors
    async def delete(self, client_id: str) -> bool:
        """Delete client by ID."""
        if not is_valid_id(client_id):
            return False
        result = await self.session.execute(delete(ClientModel).where(ClientModel.id == client_id))
        return result.rowcount > 0
