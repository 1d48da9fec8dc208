"""Marketplace template endpoints, including live demo management."""
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from template_market.core.container import ApplicationContainer
from template_market.interfaces.http.deps import get_app_container, get_db_session, get_principal
from template_market.modules.accounts import Principal
from template_market.modules.demos import DemoService
from template_market.modules.templates import (
    TemplateCreateInput,
    TemplateNotFoundError,
    TemplatePatch,
    TemplatePermissionError,
    TemplateService,
    TemplateStatus,
    TemplateValidationError,
    ensure_can_manage,
)
from template_market.schemas import (
    DemoDetailsResponse,
    DemoResponse,
    SuccessResponse,
    TemplateCreate,
    TemplateListResponse,
    TemplateResponse,
    TemplateUpdate,
)

router = APIRouter()


def _not_found(exc: TemplateNotFoundError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Template {exc.template_id} not found")


@router.post("", response_model=TemplateResponse, status_code=status.HTTP_201_CREATED, summary="Create a template listing")
async def create_template(
    payload: TemplateCreate,
    principal: Principal = Depends(get_principal),
    db: AsyncSession = Depends(get_db_session),
) -> TemplateResponse:
    service = TemplateService.with_session(db)
    try:
        template = await service.create_template(TemplateCreateInput(**payload.model_dump()), principal)
    except TemplateValidationError as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)) from exc
    return TemplateResponse.model_validate(template)


@router.get("", response_model=TemplateListResponse, summary="Browse published templates")
async def list_templates(
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    category: Optional[str] = None,
    search: Optional[str] = Query(None, max_length=200),
    db: AsyncSession = Depends(get_db_session),
) -> TemplateListResponse:
    service = TemplateService.with_session(db)
    result = await service.list_templates(
        page=page,
        page_size=page_size,
        status=TemplateStatus.PUBLISHED,
        category=category,
        search=search,
    )
    return TemplateListResponse(
        total=result.total,
        page=result.page,
        page_size=result.page_size,
        items=[TemplateResponse.model_validate(item) for item in result.items],
    )


@router.get("/mine", response_model=list[TemplateResponse], summary="Templates created by the caller")
async def list_my_templates(
    principal: Principal = Depends(get_principal),
    db: AsyncSession = Depends(get_db_session),
) -> list[TemplateResponse]:
    service = TemplateService.with_session(db)
    templates = await service.list_by_owner(principal.account_id)
    return [TemplateResponse.model_validate(item) for item in templates]


@router.get("/{template_id}", response_model=TemplateResponse, summary="Template detail")
async def get_template(template_id: str, db: AsyncSession = Depends(get_db_session)) -> TemplateResponse:
    service = TemplateService.with_session(db)
    try:
        template = await service.get_template(template_id)
    except TemplateNotFoundError as exc:
        raise _not_found(exc) from exc
    return TemplateResponse.model_validate(template)


@router.patch("/{template_id}", response_model=TemplateResponse, summary="Edit listing fields")
async def update_template(
    template_id: str,
    payload: TemplateUpdate,
    principal: Principal = Depends(get_principal),
    db: AsyncSession = Depends(get_db_session),
) -> TemplateResponse:
    patch = TemplatePatch(**payload.model_dump(exclude_unset=True))
    service = TemplateService.with_session(db)
    try:
        template = await service.update_template(template_id, patch, principal)
    except TemplateNotFoundError as exc:
        raise _not_found(exc) from exc
    except TemplatePermissionError as exc:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc)) from exc
    except TemplateValidationError as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)) from exc
    return TemplateResponse.model_validate(template)


@router.delete("/{template_id}", response_model=SuccessResponse, summary="Delete a template and its demo")
async def delete_template(
    template_id: str,
    principal: Principal = Depends(get_principal),
    db: AsyncSession = Depends(get_db_session),
    container: ApplicationContainer = Depends(get_app_container),
) -> SuccessResponse:
    service = TemplateService.with_session(db)
    try:
        template = await service.get_template(template_id)
        ensure_can_manage(template, principal)
        if template.has_live_demo:
            await DemoService.with_session(db, container).remove_demo(template_id, principal)
        await service.delete_template(template_id)
    except TemplateNotFoundError as exc:
        raise _not_found(exc) from exc
    except TemplatePermissionError as exc:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc)) from exc
    return SuccessResponse(message="Template deleted")


@router.post("/{template_id}/demo", response_model=DemoResponse, summary="Generate a live demo from the package")
async def generate_demo(
    template_id: str,
    principal: Principal = Depends(get_principal),
    db: AsyncSession = Depends(get_db_session),
    container: ApplicationContainer = Depends(get_app_container),
) -> DemoResponse:
    service = DemoService.with_session(db, container)
    try:
        demo_url = await service.generate_demo(template_id, principal)
    except TemplateNotFoundError as exc:
        raise _not_found(exc) from exc
    return DemoResponse(demo_url=demo_url)


@router.post("/{template_id}/demo/upload", response_model=DemoResponse, summary="Publish an uploaded site archive")
async def upload_demo(
    template_id: str,
    file: UploadFile = File(...),
    principal: Principal = Depends(get_principal),
    db: AsyncSession = Depends(get_db_session),
    container: ApplicationContainer = Depends(get_app_container),
) -> DemoResponse:
    service = DemoService.with_session(db, container)
    try:
        demo_url = await service.publish_uploaded_site(template_id, principal, file)
    except TemplateNotFoundError as exc:
        raise _not_found(exc) from exc
    finally:
        await file.close()
    return DemoResponse(demo_url=demo_url)


@router.delete("/{template_id}/demo", response_model=SuccessResponse, summary="Remove the live demo")
async def remove_demo(
    template_id: str,
    principal: Principal = Depends(get_principal),
    db: AsyncSession = Depends(get_db_session),
    container: ApplicationContainer = Depends(get_app_container),
) -> SuccessResponse:
    service = DemoService.with_session(db, container)
    try:
        await service.remove_demo(template_id, principal)
    except TemplateNotFoundError as exc:
        raise _not_found(exc) from exc
    return SuccessResponse(message="Demo removed")


@router.get("/{template_id}/demo", response_model=DemoDetailsResponse, summary="Live demo status")
async def get_demo_details(
    template_id: str,
    db: AsyncSession = Depends(get_db_session),
    container: ApplicationContainer = Depends(get_app_container),
) -> DemoDetailsResponse:
    service = DemoService.with_session(db, container)
    try:
        details = await service.get_demo_details(template_id)
    except TemplateNotFoundError as exc:
        raise _not_found(exc) from exc
    return DemoDetailsResponse.model_validate(details)
