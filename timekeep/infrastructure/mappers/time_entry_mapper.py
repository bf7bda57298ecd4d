"""
Time entry mapper for converting between domain entities and database models.
"""

from decimal import Decimal

from timekeep.domain.models.time_entry import TimeEntry, TimeEntryStatus, TimeEntryView
from timekeep.infrastructure.db.models import TimeEntryModel

UNKNOWN_PROJECT = "Unknown project"
UNKNOWN_CLIENT = "Unknown client"
UNKNOWN_USER = "Unknown user"


class TimeEntryMapper:
    """Maps between TimeEntry domain entity and TimeEntryModel database model."""

    def domain_to_model(self, time_entry: TimeEntry) -> TimeEntryModel:
        """Convert TimeEntry domain entity to TimeEntryModel."""
        model = TimeEntryModel(
            user_id=time_entry.user_id,
            created_at=time_entry.created_at,
            version=time_entry.version,
        )
        if time_entry.id is not None:
            model.id = time_entry.id
        self.copy_fields(time_entry, model)
        return model

    def copy_fields(self, time_entry: TimeEntry, model: TimeEntryModel) -> None:
        """Copy the mutable fields of an entry onto an existing row."""
        model.project_id = time_entry.project_id
        model.date = time_entry.date
        model.hours = time_entry.hours
        model.description = time_entry.description
        model.status = time_entry.status.value
        model.approved_by = time_entry.approved_by
        model.approved_at = time_entry.approved_at
        model.rejection_comment = time_entry.rejection_comment
        model.updated_at = time_entry.updated_at

    def model_to_domain(self, model: TimeEntryModel) -> TimeEntry:
        """Convert TimeEntryModel to TimeEntry domain entity."""
        time_entry = TimeEntry(
            id=str(model.id),
            user_id=str(model.user_id),
            project_id=str(model.project_id),
            date=model.date,
            hours=Decimal(model.hours),
            description=model.description,
            status=TimeEntryStatus(model.status) if model.status else TimeEntryStatus.DRAFT,
            approved_by=str(model.approved_by) if model.approved_by else None,
            approved_at=model.approved_at,
            rejection_comment=model.rejection_comment,
            version=model.version or 1,
        )
        if model.created_at:
            time_entry.created_at = model.created_at
        if model.updated_at:
            time_entry.updated_at = model.updated_at
        return time_entry

    def model_to_view(self, model: TimeEntryModel) -> TimeEntryView:
        """Convert a row with its joined project, client and user into a view."""
        project = model.project
        client = project.client if project is not None else None
        user = model.user

        return TimeEntryView(
            entry=self.model_to_domain(model),
            project_name=project.name if project is not None else UNKNOWN_PROJECT,
            client_id=str(client.id) if client is not None else None,
            client_name=client.name if client is not None else UNKNOWN_CLIENT,
            user_full_name=(user.full_name or user.email) if user is not None else UNKNOWN_USER,
        )
