"""Application services."""

from budgetbuddy.application.services.sync_pipeline_service import (
    SyncPipelineService,
)
from budgetbuddy.application.services.sync_session_manager import (
    SyncSessionManager,
)

__all__ = ["SyncPipelineService", "SyncSessionManager"]
