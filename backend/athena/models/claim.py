from typing import Any, List, Optional

from pydantic import BaseModel


class ExtractClaimsRequest(BaseModel):
    # Any JSON value; the routes answer 400 for anything but non-blank text
    text: Optional[Any] = None


class ExtractClaimsResponse(BaseModel):
    claims: List[str]


class ClaimExtractionResult(BaseModel):
    """Outcome of one LLM claim-extraction pass."""
    success: bool
    claims: List[str] = []
    processing_time_ms: int = 0
    error: Optional[str] = None


class TextSummary(BaseModel):
    length: int
    preview: str
    processed_at: str


class ExtractedClaims(BaseModel):
    extracted: List[str]
    count: int
    processing_time_ms: int


class ProcessingInfo(BaseModel):
    steps: List[str]
    completed_at: str


class TextClaimsResponse(BaseModel):
    success: bool = True
    text: TextSummary
    claims: ExtractedClaims
    processing: ProcessingInfo


class PDFProcessingResult(BaseModel):
    success: bool
    text: str = ""
    page_count: int = 0
    is_image_based: bool = False
    file_name: Optional[str] = None
    file_size: int = 0
    extracted_at: Optional[str] = None
    message: Optional[str] = None
    error: Optional[str] = None
