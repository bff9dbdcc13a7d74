"""Typed client actions and an async API client that resolves them."""

from helpdesk.client.action_types import ActionType
from helpdesk.client.actions import Action, create_action
from helpdesk.client.api import HelpdeskClient

__all__ = ["Action", "ActionType", "HelpdeskClient", "create_action"]
