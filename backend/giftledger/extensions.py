# Overview: Extension instances shared across the app: entity store and sessions.

from .services.store_service import EntityStore
from .services.session_service import SessionRegistry

store = EntityStore()
sessions = SessionRegistry()
