from auditflow.api.crud_router import build_crud_router
from auditflow.iam.schemas import UserCreate, UserRead, UserUpdate
from auditflow.iam.service import user_service


router = build_crud_router(
    prefix="/users",
    tag="users",
    entity="user",
    service=user_service,
    create_model=UserCreate,
    update_model=UserUpdate,
    read_model=UserRead,
)
