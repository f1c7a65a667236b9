"""UI collaborator interfaces: dialogs, notifications and navigation."""

from crudflow.ui.models import NavigationContext, NavigationHandler, Severity
from crudflow.ui.protocol import Dialogs, NavigationSource, Notifier

__all__ = [
    "Dialogs",
    "Notifier",
    "NavigationSource",
    "NavigationContext",
    "NavigationHandler",
    "Severity",
]
