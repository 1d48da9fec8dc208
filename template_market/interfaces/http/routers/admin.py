"""Administrative endpoints for moderating templates and managing accounts."""
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from template_market.interfaces.http.deps import get_current_admin, get_db_session
from template_market.modules.accounts import Account, AccountNotFoundError, AccountService, Principal
from template_market.modules.templates import TemplateNotFoundError, TemplateService, TemplateStatus
from template_market.schemas import AccountResponse, AccountRoleUpdate, TemplateResponse, TemplateStatusUpdate

router = APIRouter()


@router.get("/templates", response_model=List[TemplateResponse], summary="Templates by moderation status")
async def list_templates_by_status(
    status_filter: TemplateStatus = Query(TemplateStatus.PENDING, alias="status"),
    admin: Account = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db_session),
):
    service = TemplateService.with_session(db)
    templates = await service.list_by_status(status_filter)
    return [TemplateResponse.model_validate(item) for item in templates]


@router.put("/templates/{template_id}/status", response_model=TemplateResponse, summary="Approve or reject a template")
async def update_template_status(
    template_id: str,
    payload: TemplateStatusUpdate,
    admin: Account = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db_session),
):
    service = TemplateService.with_session(db)
    try:
        template = await service.update_status(
            template_id,
            status=payload.status,
            reviewer=Principal.of(admin),
            comment=payload.admin_comment,
        )
    except TemplateNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Template not found") from exc
    return TemplateResponse.model_validate(template)


@router.get("/accounts", response_model=List[AccountResponse], summary="All accounts")
async def list_accounts(
    admin: Account = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db_session),
):
    service = AccountService.with_session(db)
    accounts = await service.list_accounts()
    return [AccountResponse.model_validate(account) for account in accounts]


@router.put("/accounts/{account_id}/role", response_model=AccountResponse, summary="Change an account role")
async def update_account_role(
    account_id: str,
    payload: AccountRoleUpdate,
    admin: Account = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db_session),
):
    if account_id == admin.id and payload.role != admin.role:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Cannot change your own role")
    service = AccountService.with_session(db)
    try:
        account = await service.set_role(account_id, payload.role)
    except AccountNotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Account not found") from exc
    return AccountResponse.model_validate(account)
