from docingest.config.settings import Settings
from docingest.logging.logger import Log
from docingest.pdf.base import BasePdfParser
from docingest.pdf.pdfplumber_adapter import PdfPlumberAdapter
from docingest.pdf.pymupdf_adapter import PyMuPdfAdapter


class PdfParserFactory:
    """Picks the PDF backend shared by classification, text extraction and OCR rendering."""

    ADAPTERS: dict[str, type[BasePdfParser]] = {
        "pdfplumber": PdfPlumberAdapter,
        "pymupdf": PyMuPdfAdapter,
    }

    @classmethod
    def create(cls, settings: Settings) -> BasePdfParser:
        engine = settings.pdf_engine.strip().lower()
        parser_cls = cls.ADAPTERS.get(engine)
        if parser_cls is None:
            raise ValueError(
                f"Unknown PDF engine '{engine}'. Choose from: {sorted(cls.ADAPTERS)}"
            )
        Log.info(f"Using {engine} PDF parser")
        return parser_cls()
