"""Configuration settings using Pydantic Settings.

Holds every title and text the controller shows to users, so forms can be
localized or reworded without subclassing.

Usage:
    from crudflow.config import ControllerSettings

    # Load from environment variables (CRUDFLOW_*)
    settings = ControllerSettings()

    # Or override with explicit values
    settings = ControllerSettings(title_not_found="Nothing here")
"""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ControllerSettings(BaseSettings):  # type: ignore[misc]
    """User-visible texts and controller tuning.

    Texts for restricted and unauthorized operations are format strings with
    an `{operation}` placeholder ("Create", "Read", "Update", "Delete").

    Environment Variables:
        CRUDFLOW_TEXT_RESTRICTED, CRUDFLOW_TITLE_RESTRICTED, ...
        CRUDFLOW_HISTORY_SIZE
    """

    model_config = SettingsConfigDict(
        env_prefix="CRUDFLOW_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    title_restricted: str = "Restricted"
    text_restricted: str = "The {operation} operation is not available for this record."

    title_unauthorized: str = "Unauthorized"
    text_unauthorized: str = "You are not authorized to perform the {operation} operation."

    title_not_found: str = "Not Found"
    text_not_found: str = "The requested record could not be found."

    title_unexpected_error: str = "Unexpected Error"

    title_confirm_delete: str = "Confirm Delete"
    text_confirm_delete: str = "Are you sure you want to delete this record?"
    ok_text_delete: str = "Delete"

    title_confirm_discard: str = "Discard Changes"
    text_confirm_discard: str = "You have unsaved changes. Do you want to discard them?"
    ok_text_discard: str = "Discard"

    title_invalid_save_state: str = "Nothing to Save"
    text_invalid_save_state: str = "Only a record being created or edited can be saved."

    title_invalid_cancel_state: str = "Nothing to Cancel"
    text_invalid_cancel_state: str = "Only a record being created or edited can be cancelled."

    title_invalid_state: str = "No Record Loaded"
    text_invalid_state: str = "Load a record before trying to {operation} it."

    title_invalid_submit: str = "Invalid Data"
    text_invalid_submit: str = "Please correct the highlighted fields before saving."

    title_operation_in_progress: str = "Please Wait"
    text_operation_in_progress: str = "Another operation is still in progress."

    history_size: int = Field(default=100, ge=0)

    def restricted(self, operation: str) -> str:
        return self.text_restricted.format(operation=operation)

    def unauthorized(self, operation: str) -> str:
        return self.text_unauthorized.format(operation=operation)

    def invalid_state(self, operation: str) -> str:
        return self.text_invalid_state.format(operation=operation.lower())
