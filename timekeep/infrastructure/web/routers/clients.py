"""
Clients router.
Everyone may list clients; only admins may change them.
"""

from typing import Annotated, List

from fastapi import APIRouter, Depends, status

from timekeep.application.dto.catalog_dto import ClientResponseDTO, CreateClientRequestDTO, UpdateClientRequestDTO
from timekeep.domain.services.catalog_service import CatalogService
from timekeep.infrastructure.auth.dependencies import CurrentUser
from timekeep.infrastructure.rate_limiting.dependencies import api_rate_limit
from timekeep.infrastructure.web.dependencies import get_catalog_service

router = APIRouter(dependencies=[Depends(api_rate_limit)])

Service = Annotated[CatalogService, Depends(get_catalog_service)]


@router.get("", response_model=List[ClientResponseDTO])
async def list_clients(user: CurrentUser, service: Service):
    """List all clients."""
    return [ClientResponseDTO.from_entity(client) for client in await service.list_clients()]


@router.post("", status_code=status.HTTP_201_CREATED, response_model=ClientResponseDTO)
async def create_client(request: CreateClientRequestDTO, user: CurrentUser, service: Service):
    """Create a client."""
    return ClientResponseDTO.from_entity(await service.create_client(user, request.name))


@router.get("/{client_id}", response_model=ClientResponseDTO)
async def get_client(client_id: str, user: CurrentUser, service: Service):
    return ClientResponseDTO.from_entity(await service.get_client(client_id))


@router.patch("/{client_id}", response_model=ClientResponseDTO)
async def rename_client(client_id: str, request: UpdateClientRequestDTO, user: CurrentUser, service: Service):
    """Rename a client."""
    return ClientResponseDTO.from_entity(await service.rename_client(user, client_id, request.name))


@router.delete("/{client_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_client(client_id: str, user: CurrentUser, service: Service):
    """Delete a client. Fails with 409 while the client still has projects."""
    await service.delete_client(user, client_id)
