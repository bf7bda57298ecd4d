"""
Client mapper for converting between domain entities and database models.
"""

from timekeep.domain.models.client import Client
from timekeep.infrastructure.db.models import ClientModel


class ClientMapper:
    """Maps between Client domain entity and ClientModel database model."""

    def domain_to_model(self, client: Client) -> ClientModel:
        """Convert Client domain entity to ClientModel."""
        model = ClientModel(
            name=client.name,
            created_at=client.created_at,
            updated_at=client.updated_at,
        )
        if client.id is not None:
            model.id = client.id
        return model

    def model_to_domain(self, model: ClientModel) -> Client:
        """Convert ClientModel to Client domain entity."""
        client = Client(id=str(model.id), name=model.name)
        if model.created_at:
            client.created_at = model.created_at
        if model.updated_at:
            client.updated_at = model.updated_at
        return client
