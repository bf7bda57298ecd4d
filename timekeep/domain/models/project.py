"""
Project domain model.
A project belongs to exactly one client and is what time entries are logged against.
"""

from dataclasses import dataclass

from timekeep.domain.models.base import BaseEntity, ValidationError
from timekeep.domain.models.client import clean_name


@dataclass(kw_only=True)
class Project(BaseEntity):
    """Project entity."""

    name: str
    client_id: str

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        self.name = clean_name(self.name, "Project")
        if not self.client_id:
            raise ValidationError("Client ID is required", "client_id")

    def rename(self, name: str) -> None:
        self.name = clean_name(name, "Project")
        self.mark_as_updated()

    def move_to_client(self, client_id: str) -> None:
        if not client_id:
            raise ValidationError("Client ID is required", "client_id")
        self.client_id = client_id
        self.mark_as_updated()
