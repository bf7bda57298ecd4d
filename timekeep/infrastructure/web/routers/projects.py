"""
Projects router.
Everyone may list projects; only admins may change them.
"""

from typing import Annotated, List, Optional

from fastapi import APIRouter, Depends, Query, status

from timekeep.application.dto.catalog_dto import CreateProjectRequestDTO, ProjectResponseDTO, UpdateProjectRequestDTO
from timekeep.domain.services.catalog_service import CatalogService
from timekeep.infrastructure.auth.dependencies import CurrentUser
from timekeep.infrastructure.rate_limiting.dependencies import api_rate_limit
from timekeep.infrastructure.web.dependencies import get_catalog_service

router = APIRouter(dependencies=[Depends(api_rate_limit)])

Service = Annotated[CatalogService, Depends(get_catalog_service)]


@router.get("", response_model=List[ProjectResponseDTO])
async def list_projects(
    user: CurrentUser,
    service: Service,
    client_id: Optional[str] = Query(None, description="Only projects of this client"),
):
    """List projects."""
    return [ProjectResponseDTO.from_entity(project) for project in await service.list_projects(client_id)]


@router.post("", status_code=status.HTTP_201_CREATED, response_model=ProjectResponseDTO)
async def create_project(request: CreateProjectRequestDTO, user: CurrentUser, service: Service):
    """Create a project under an existing client."""
    return ProjectResponseDTO.from_entity(await service.create_project(user, request.name, request.client_id))


@router.get("/{project_id}", response_model=ProjectResponseDTO)
async def get_project(project_id: str, user: CurrentUser, service: Service):
    return ProjectResponseDTO.from_entity(await service.get_project(project_id))


@router.patch("/{project_id}", response_model=ProjectResponseDTO)
async def update_project(project_id: str, request: UpdateProjectRequestDTO, user: CurrentUser, service: Service):
    """
    Rename a project or move it to another client.

    - **name**: New name
    - **client_id**: Client to move the project to
    """
    project = await service.update_project(user, project_id, name=request.name, client_id=request.client_id)
    return ProjectResponseDTO.from_entity(project)


@router.delete("/{project_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_project(project_id: str, user: CurrentUser, service: Service):
    """Delete a project. Fails with 409 while it has time entries."""
    await service.delete_project(user, project_id)
