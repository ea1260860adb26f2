from typing import Optional

from fastapi import APIRouter, File, Request, UploadFile

from app.services.ingestion.pipeline import ContractImportPipeline
from app.services.ingestion.result_assembler import ImportResult

router = APIRouter()


def _pipeline(request: Request) -> ContractImportPipeline:
    pipeline = getattr(request.app.state, "pipeline", None)
    if pipeline is None:
        raise RuntimeError("Import pipeline (app.state.pipeline) is not initialized")
    return pipeline


@router.post("/contracts/import", response_model=ImportResult)
async def import_contract_upload(
    request: Request,
    created_by: Optional[str] = None,
    require_existing_customer: bool = False,
    file: UploadFile = File(...),
):
    data = await file.read()
    return await _pipeline(request).run_bytes(
        data,
        file.filename or "",
        created_by=created_by,
        require_existing_customer=require_existing_customer,
    )


@router.post("/contracts/import/{storage_key:path}", response_model=ImportResult)
async def import_contract_document(
    request: Request,
    storage_key: str,
    created_by: Optional[str] = None,
    require_existing_customer: bool = False,
    delete_after: bool = False,
):
    return await _pipeline(request).run_document(
        storage_key,
        created_by=created_by,
        require_existing_customer=require_existing_customer,
        delete_after=delete_after,
    )
