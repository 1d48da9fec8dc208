"""Upload endpoints storing template packages and preview images."""
from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status

from template_market.core.container import ApplicationContainer
from template_market.infrastructure.storage import StorageError
from template_market.interfaces.http.deps import get_app_container, get_current_account
from template_market.modules.accounts import Account
from template_market.modules.assets import (
    ARCHIVES_FOLDER,
    IMAGES_FOLDER,
    AssetError,
    StoredAsset,
    TemplateAssetService,
)
from template_market.schemas import UploadResponse

router = APIRouter()


async def _store(container: ApplicationContainer, account: Account, file: UploadFile, folder: str) -> StoredAsset:
    service = TemplateAssetService.from_container(container)
    try:
        return await service.store_upload(account.id, file, folder)
    except AssetError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except StorageError as exc:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="Upload to storage failed") from exc


@router.post("/archives", response_model=UploadResponse, status_code=status.HTTP_201_CREATED, summary="Upload a template package (.zip)")
async def upload_archive(
    file: UploadFile = File(...),
    account: Account = Depends(get_current_account),
    container: ApplicationContainer = Depends(get_app_container),
) -> UploadResponse:
    asset = await _store(container, account, file, ARCHIVES_FOLDER)
    return UploadResponse.model_validate(asset)


@router.post("/images", response_model=UploadResponse, status_code=status.HTTP_201_CREATED, summary="Upload a preview image")
async def upload_image(
    file: UploadFile = File(...),
    account: Account = Depends(get_current_account),
    container: ApplicationContainer = Depends(get_app_container),
) -> UploadResponse:
    asset = await _store(container, account, file, IMAGES_FOLDER)
    return UploadResponse.model_validate(asset)
