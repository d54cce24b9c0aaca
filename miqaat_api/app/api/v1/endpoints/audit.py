"""
Audit log endpoints for API v1.

Provides access to the audit trail for administrators.  Logs capture
create, update, delete and roster sync actions and support filtering
by acting ITS id, object type, action and date range.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from miqaat_api.app.core.enums import AuditObjectType
from miqaat_api.app.core.security import require_roles
from miqaat_api.app.services.audit_service import AuditService

router = APIRouter()


@router.get("/logs")
async def list_audit_logs(
    its_id: Optional[int] = Query(None, description="Filter by acting ITS id"),
    object_type: Optional[AuditObjectType] = Query(None, description="Filter by object type"),
    action: Optional[str] = Query(None, description="Filter by action (create, update, delete, sync)"),
    start_date: Optional[str] = Query(None, description="Start date (ISO format) for filtering"),
    end_date: Optional[str] = Query(None, description="End date (ISO format) for filtering"),
    limit: int = Query(100, ge=1, le=500, description="Maximum number of logs to return"),
    offset: int = Query(0, ge=0, description="Number of logs to skip"),
    current_user: dict = Depends(require_roles("admin")),
) -> List[dict]:
    """Retrieve audit logs with optional filters, newest first."""
    return await AuditService.list_logs(
        its_id=its_id,
        object_type=object_type,
        action=action,
        start_date=start_date,
        end_date=end_date,
        limit=limit,
        offset=offset,
    )
