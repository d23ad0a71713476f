"""File import endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile

from ledgerfolio.api.deps import get_import_file_repo, get_reconciliation_engine
from ledgerfolio.api.schemas import (
    ImportFileResponse,
    ImportResultResponse,
    PreviewResponse,
)
from ledgerfolio.core.exceptions import ImportRejectedError
from ledgerfolio.domain.models import BrokerProfile
from ledgerfolio.repositories.sqlalchemy import SqlAlchemyImportFileRepository
from ledgerfolio.services import ReconciliationEngine

router = APIRouter(prefix="/imports", tags=["imports"])


def _read_upload(file: UploadFile) -> bytes:
    content = file.file.read()
    if not content:
        raise ImportRejectedError("Uploaded file is empty")
    return content


@router.post("", response_model=ImportResultResponse, status_code=201)
def import_file(
    file: UploadFile = File(...),
    profile: BrokerProfile = Form(BrokerProfile.QUESTRADE),
    default_account: Optional[str] = Form(None),
    default_currency: Optional[str] = Form(None),
    dedup: bool = Form(True),
    skip_known_files: bool = Form(False),
    engine: ReconciliationEngine = Depends(get_reconciliation_engine),
) -> ImportResultResponse:
    """
    Import a broker export (CSV or Excel).

    Valid rows are merged best-effort: duplicates are skipped and bad rows
    reported without aborting the rest of the file.
    """
    result = engine.import_file(
        _read_upload(file),
        filename=file.filename or "upload",
        profile=profile,
        default_account_number=default_account,
        default_currency=default_currency,
        dedup_by_signature=dedup,
        skip_known_files=skip_known_files,
    )
    return ImportResultResponse.model_validate(result)


@router.post("/preview", response_model=PreviewResponse)
def preview_file(
    file: UploadFile = File(...),
    profile: BrokerProfile = Form(BrokerProfile.QUESTRADE),
    default_account: Optional[str] = Form(None),
    default_currency: Optional[str] = Form(None),
    engine: ReconciliationEngine = Depends(get_reconciliation_engine),
) -> PreviewResponse:
    """Parse an upload without writing anything."""
    result = engine.preview(
        _read_upload(file),
        filename=file.filename or "upload",
        profile=profile,
        default_account_number=default_account,
        default_currency=default_currency,
    )
    return PreviewResponse.model_validate(result)


@router.get("", response_model=list[ImportFileResponse])
def list_imports(
    limit: int = Query(50, ge=1, le=500),
    import_repo: SqlAlchemyImportFileRepository = Depends(get_import_file_repo),
) -> list[ImportFileResponse]:
    """Most recent imports first."""
    return [ImportFileResponse.model_validate(f) for f in import_repo.list_recent(limit)]
