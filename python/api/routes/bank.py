"""
Bank Statement API Routes

Statement upload, JSON template download and the stored account snapshot.
"""

from fastapi import APIRouter, Depends, File, HTTPException, Query, Request, UploadFile
from fastapi.responses import JSONResponse

from statement_processor.errors import SUPPORTED_FORMATS
from statement_processor.ingestion import IngestionOrchestrator, UploadedFile
from statement_processor.models import BankType
from statement_processor.store import Store
from statement_processor.templates import SUPPORTED_BANKS, build_json_template

from ..auth import get_current_user_id, get_optional_user_id
from ..database import get_store

router = APIRouter(prefix="/bank", tags=["bank"])


def get_orchestrator(
    request: Request,
    store: Store = Depends(get_store),
) -> IngestionOrchestrator:
    state = request.app.state
    if state.orchestrator is None:
        state.orchestrator = IngestionOrchestrator(
            store,
            settings=state.settings,
            text_extractor=state.text_extractor,
        )
    return state.orchestrator


@router.post("/upload")
def upload_statement(
    statement: UploadFile | None = File(None),
    user_id: str | None = Depends(get_optional_user_id),
    orchestrator: IngestionOrchestrator = Depends(get_orchestrator),
) -> JSONResponse:
    """Upload a bank or wallet statement (.json, .csv or .pdf).

    Args:
        statement: Multipart file field
        user_id: Authenticated user (None is rejected with 401)
        orchestrator: Ingestion pipeline

    Returns:
        Upload summary, or a structured error with the matching status code
    """
    upload = None
    if statement is not None and statement.filename:
        # Read one byte past the ceiling so oversize uploads are still detected
        content = statement.file.read(orchestrator.settings.max_upload_bytes + 1)
        upload = UploadedFile(
            filename=statement.filename,
            content=content,
            size=statement.size if statement.size is not None else len(content),
        )

    result = orchestrator.handle_upload(user_id, upload)
    return JSONResponse(status_code=result.status_code, content=result.to_dict())


@router.get("/template")
async def get_template(
    bank_type: str = Query("wallet", alias="bankType"),
) -> dict:
    """Get the JSON upload template for a bank type.

    Args:
        bank_type: "wallet" (or "opay") or "traditional"

    Returns:
        Template with supported banks and formats
    """
    resolved = BankType.from_value(bank_type)
    if resolved is None:
        raise HTTPException(status_code=400, detail=f"Unknown bank type: {bank_type}")

    return {
        "bankType": resolved.value,
        "jsonTemplate": build_json_template(resolved),
        "supportedBanks": SUPPORTED_BANKS,
        "supportedFormats": SUPPORTED_FORMATS,
    }


@router.get("/account")
async def get_account_info(
    user_id: str = Depends(get_current_user_id),
    store: Store = Depends(get_store),
) -> dict:
    """Get the account snapshot from the user's latest statement upload."""
    account_info = store.get_account_info(user_id)
    if account_info is None:
        raise HTTPException(status_code=404, detail="No account information uploaded yet")
    return account_info.to_dict()
