"""
Client and project DTOs for the application layer.
"""

from typing import Optional

from pydantic import Field

from timekeep.domain.models.client import Client
from timekeep.domain.models.project import Project

from .base_dto import RequestDTO, ResponseDTO


class CreateClientRequestDTO(RequestDTO):
    name: str = Field(description="Client name")


class UpdateClientRequestDTO(RequestDTO):
    name: str = Field(description="New client name")


class ClientResponseDTO(ResponseDTO):
    name: str

    @classmethod
    def from_entity(cls, client: Client) -> "ClientResponseDTO":
        return cls(id=client.id, created_at=client.created_at, updated_at=client.updated_at, name=client.name)


class CreateProjectRequestDTO(RequestDTO):
    name: str = Field(description="Project name")
    client_id: str = Field(description="Client the project belongs to")


class UpdateProjectRequestDTO(RequestDTO):
    name: Optional[str] = Field(default=None, description="New project name")
    client_id: Optional[str] = Field(default=None, description="Move the project to this client")


class ProjectResponseDTO(ResponseDTO):
    name: str
    client_id: str

    @classmethod
    def from_entity(cls, project: Project) -> "ProjectResponseDTO":
        return cls(
            id=project.id,
            created_at=project.created_at,
            updated_at=project.updated_at,
            name=project.name,
            client_id=project.client_id,
        )
