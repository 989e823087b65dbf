"""Explorer orchestration: request sequencing and the current result state."""

from backend.app.orchestration.controller import (
    ExplorerController,
    ExplorerState,
    ExplorerStatus,
    OrganDetail,
    StaleResponseError,
    UnknownOrganError,
)

__all__ = [
    "ExplorerController",
    "ExplorerState",
    "ExplorerStatus",
    "OrganDetail",
    "StaleResponseError",
    "UnknownOrganError",
]
