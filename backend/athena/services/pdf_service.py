import io
import logging

from pypdf import PdfReader
from pypdf.errors import FileNotDecryptedError, PdfReadError

from athena.core.utils import utc_now_iso
from athena.models.claim import PDFProcessingResult

logger = logging.getLogger(__name__)

# Below this many characters of extracted text the PDF is treated as scanned
MIN_TEXT_LENGTH = 50


class PDFService:
    """
    Extracts the text layer of uploaded PDF documents.
    """

    def extract_text(self, data: bytes, file_name: str = None) -> PDFProcessingResult:
        """
        Extract text from every page of a PDF.

        Args:
            data (bytes): Raw PDF file content
            file_name (str): Original upload name, echoed back

        Returns:
            PDFProcessingResult: Extracted text, or success=False with a
            user-facing error for invalid or password-protected files
        """
        file_size = len(data)

        try:
            reader = PdfReader(io.BytesIO(data))
            if reader.is_encrypted:
                raise FileNotDecryptedError("File has not been decrypted")

            pages = []
            for page in reader.pages:
                page_text = " ".join((page.extract_text() or "").split())
                if page_text:
                    pages.append(page_text)
            page_count = len(reader.pages)

        except FileNotDecryptedError:
            return self._failure("PDF is password protected. Please provide an unprotected PDF.", file_name, file_size)
        except PdfReadError as e:
            logger.warning(f"[PDF] Invalid PDF '{file_name}': {e}")
            return self._failure(
                "Invalid PDF file. Please ensure the file is a valid PDF document.", file_name, file_size
            )
        except Exception as e:
            logger.exception(f"[PDF] Error processing '{file_name}'")
            return self._failure(f"PDF processing failed: {e}", file_name, file_size)

        text = "\n\n".join(pages)
        is_image_based = not pages or len(text) < MIN_TEXT_LENGTH

        logger.info(f"[PDF] Extracted {len(text)} chars from {page_count} pages of '{file_name}'")
        return PDFProcessingResult(
            success=True,
            text=text,
            page_count=page_count,
            is_image_based=is_image_based,
            file_name=file_name,
            file_size=file_size,
            extracted_at=utc_now_iso(),
            message=(
                "PDF appears to be scanned or image-based. For full OCR support, please use a text-based PDF."
                if is_image_based else "PDF processed successfully"
            )
        )

    @staticmethod
    def _failure(error: str, file_name: str, file_size: int) -> PDFProcessingResult:
        return PDFProcessingResult(success=False, error=error, file_name=file_name, file_size=file_size)
