import asyncio
from fastapi import APIRouter, File, UploadFile, Depends, HTTPException, status

from athena.api.dependencies import get_claim_extraction_service, get_pdf_service
from athena.core.utils import utc_now_iso
from athena.middleware.auth_middleware import get_current_user_id
from athena.models.claim import (
    ExtractClaimsRequest,
    ExtractClaimsResponse,
    ExtractedClaims,
    PDFProcessingResult,
    ProcessingInfo,
    TextClaimsResponse,
    TextSummary,
)
from athena.services.claim_extraction_service import ClaimExtractionService
from athena.services.pdf_service import PDFService

router = APIRouter()

PREVIEW_LENGTH = 200
MIN_TEXT_LENGTH = 10


@router.post("/extract", response_model=ExtractClaimsResponse)
async def extract_claims(
    data: ExtractClaimsRequest,
    user_id: str = Depends(get_current_user_id),
    service: ClaimExtractionService = Depends(get_claim_extraction_service)
):
    """
    Extract the checkable factual claims from a block of text.
    """
    if not isinstance(data.text, str) or not data.text.strip():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Text is required and must be a string")

    loop = asyncio.get_running_loop()
    result = await loop.run_in_executor(None, service.extract_claims, data.text)

    if not result.success:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=result.error)

    return {"claims": result.claims}


@router.post("/from-text", response_model=TextClaimsResponse)
async def claims_from_text(
    data: ExtractClaimsRequest,
    user_id: str = Depends(get_current_user_id),
    service: ClaimExtractionService = Depends(get_claim_extraction_service)
):
    """
    Extract claims from document text (typically the output of /process-pdf)
    and report what was processed.
    """
    if not isinstance(data.text, str) or not data.text:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Text content is required")

    if len(data.text.strip()) < MIN_TEXT_LENGTH:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Text content is too short to extract meaningful claims"
        )

    processed_at = utc_now_iso()
    loop = asyncio.get_running_loop()
    result = await loop.run_in_executor(None, service.extract_claims, data.text)

    if not result.success:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=result.error)

    text = data.text
    preview = text[:PREVIEW_LENGTH] + ("..." if len(text) > PREVIEW_LENGTH else "")

    return TextClaimsResponse(
        text=TextSummary(length=len(text), preview=preview, processed_at=processed_at),
        claims=ExtractedClaims(
            extracted=result.claims,
            count=len(result.claims),
            processing_time_ms=result.processing_time_ms
        ),
        processing=ProcessingInfo(
            steps=["Text Analysis", "Claim Extraction"],
            completed_at=utc_now_iso()
        )
    )


@router.post("/process-pdf", response_model=PDFProcessingResult, response_model_exclude_none=True)
async def process_pdf(
    file: UploadFile = File(...),
    user_id: str = Depends(get_current_user_id),
    service: PDFService = Depends(get_pdf_service)
):
    """
    Extract the text layer of an uploaded PDF.

    Scanned (image-only) PDFs succeed with is_image_based set; invalid or
    password-protected files come back with success=false and an error.
    """
    if file.content_type != "application/pdf":
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Only PDF files are supported")

    file_content = await file.read()
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, service.extract_text, file_content, file.filename)
