from fastapi import APIRouter, Depends
from fastapi.responses import Response

from auditflow.audits.api import (
    business_intelligence_router,
    checklist_responses_router,
    follow_up_actions_router,
    observations_router,
    router as audits_router,
)
from auditflow.core.auth import get_current_principal
from auditflow.core.config import get_settings
from auditflow.core.errors import NotFoundError
from auditflow.iam.api import router as users_router
from auditflow.leads.api import router as leads_router
from auditflow.masterdata.api import (
    audit_types_router,
    checklist_items_router,
    checklists_router,
    industries_router,
)
from auditflow.metrics import generate_metrics_payload, metrics_content_type
from auditflow.platform.security.context import Principal
from auditflow.platform.security.gate import check_access
from auditflow.reporting.api import router as reporting_router

router = APIRouter()
router.include_router(audits_router)
router.include_router(checklist_responses_router)
router.include_router(observations_router)
router.include_router(business_intelligence_router)
router.include_router(follow_up_actions_router)
router.include_router(leads_router)
router.include_router(industries_router)
router.include_router(audit_types_router)
router.include_router(checklists_router)
router.include_router(checklist_items_router)
router.include_router(users_router)
router.include_router(reporting_router)


@router.get("/health", tags=["system"])
def health() -> dict[str, str]:
    settings = get_settings()
    return {
        "status": "ok",
        "service": settings.app_name,
        "environment": settings.app_env,
    }


@router.get("/me", tags=["auth"])
async def me(principal: Principal | None = Depends(get_current_principal)) -> dict[str, str]:
    principal = check_access(principal, "profile", "read")
    return {
        "userId": principal.user_id,
        "role": principal.role,
        "tenantId": principal.tenant_id,
    }


@router.get("/metrics", tags=["system"])
def metrics(principal: Principal | None = Depends(get_current_principal)) -> Response:
    settings = get_settings()
    if not settings.metrics_enabled:
        raise NotFoundError("metrics")
    check_access(principal, "system", "metrics")
    return Response(content=generate_metrics_payload(), media_type=metrics_content_type())
