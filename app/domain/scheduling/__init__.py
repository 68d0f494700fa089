"""
Scheduling Domain

Scope resolution for recurring series: which occurrences of a recurring
capacity schedule or booking an edit/delete action reaches.
"""
from .scope import (
    ScopeDialog,
    ScopeMode,
    ScopeSelection,
    SeriesInfo,
    available_modes,
    resolve_scope,
    select_occurrences,
)
from .router import router

__all__ = [
    "ScopeDialog",
    "ScopeMode",
    "ScopeSelection",
    "SeriesInfo",
    "available_modes",
    "resolve_scope",
    "select_occurrences",
    "router",
]
