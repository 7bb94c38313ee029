import time

from docingest.concurrency.governor import Governors
from docingest.config.limits import OcrConfig, PipelineConfig, VectorizationConfig
from docingest.config.settings import Settings
from docingest.embedding.factory import EmbedderFactory
from docingest.embedding.orchestrator import EmbeddingOrchestrator
from docingest.extraction.classifier import Classifier
from docingest.extraction.text_extractor import TextExtractor
from docingest.logging.logger import Log
from docingest.ocr.engine import OcrEngine
from docingest.ocr.tesseract_adapter import TesseractRecognizer
from docingest.pdf.factory import PdfParserFactory
from docingest.processor.exceptions import IngestionError, ProcessorError
from docingest.processor.models import (
    ExtractedDocument,
    FailureReason,
    IngestionResult,
    Phase,
    ProgressCallback,
    RawDocument,
)
from docingest.processor.pipeline import PipelineContext, PipelineStep
from docingest.processor.progress import report
from docingest.processor.steps import (
    ClassifyStep,
    ExtractTextStep,
    FinalizeStep,
    OcrStep,
    PlainFormatStep,
    ValidateStep,
    failure_result,
)
from docingest.storage.base import BaseChunkStore
from docingest.storage.factory import ChunkStoreFactory
from docingest.vectorization.vectorizer import Vectorizer


class Processor:
    """Orchestrates document ingestion.

    Pipeline: validate -> [extraction permit] classify -> extract text -> OCR
    decision -> finalize, then vectorize the extracted text.
    Guardrails run before a permit is taken so rejected uploads never queue.
    """

    def __init__(
        self,
        classifier: Classifier,
        text_extractor: TextExtractor,
        ocr_engine: OcrEngine,
        vectorizer: Vectorizer,
        governors: Governors,
        config: PipelineConfig | None = None,
    ) -> None:
        self._vectorizer = vectorizer
        self._governors = governors
        self._config = config or PipelineConfig()
        self._guard_steps: list[PipelineStep] = [ValidateStep()]
        self._steps: list[PipelineStep] = [
            PlainFormatStep(),
            ClassifyStep(classifier),
            ExtractTextStep(text_extractor),
            OcrStep(ocr_engine),
            FinalizeStep(),
        ]

    @property
    def default_config(self) -> PipelineConfig:
        return self._config

    async def extract(
        self,
        document: RawDocument,
        config: PipelineConfig | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> ExtractedDocument:
        """Turn raw bytes into text; never raises for document-level failures."""
        context = PipelineContext(
            document=document,
            config=config or self._config,
            started=time.monotonic(),
            on_progress=on_progress,
        )
        with Log.document(document.filename):
            Log.info(
                f"Extracting {document.filename} ({document.size} bytes, {document.mime_type})"
            )
            try:
                await self._run_steps(self._guard_steps, context)
                async with self._governors.extraction.slot():
                    await self._run_steps(self._steps, context)
                if context.result is None:
                    raise ProcessorError("pipeline finished without a result")
            except IngestionError as exc:
                Log.warning(f"Extraction of {document.filename} failed: {exc.reason}")
                return failure_result(context, exc.reason, exc.user_message)
            except Exception:
                Log.exception(f"Unexpected error while extracting {document.filename}")
                return failure_result(context, FailureReason.CORRUPTED)
            return context.result

    async def ingest(
        self,
        document: RawDocument,
        document_id: str,
        config: PipelineConfig | None = None,
        on_progress: ProgressCallback | None = None,
        vectorization_config: VectorizationConfig | None = None,
    ) -> IngestionResult:
        """Extract, then vectorize whatever text came out."""
        extracted = await self.extract(document, config, on_progress)
        result = IngestionResult(extracted=extracted)
        if extracted.success and extracted.text.strip():
            with Log.document(document_id):
                result.vectorization = await self._vectorizer.vectorize(
                    extracted.text,
                    document_id,
                    extracted.source,
                    document_name=document.filename,
                    config=vectorization_config,
                    on_progress=on_progress,
                )
        total = result.vectorization.total_chunks if result.vectorization else 0
        report(on_progress, Phase.COMPLETE, total, total)
        return result

    @staticmethod
    async def _run_steps(steps: list[PipelineStep], context: PipelineContext) -> None:
        for step in steps:
            if context.result is not None:
                return
            await step.run(context)


def build_processor(
    settings: Settings,
    store: BaseChunkStore | None = None,
    governors: Governors | None = None,
) -> Processor:
    """Build a Processor with all required adapters."""
    parser = PdfParserFactory.create(settings)
    governors = governors or Governors.from_settings(settings)
    ocr_engine = OcrEngine(
        parser=parser,
        recognizer=TesseractRecognizer(language=settings.ocr_language),
        governor=governors.ocr,
        config=OcrConfig.from_settings(settings),
    )
    orchestrator = EmbeddingOrchestrator(
        embedder=EmbedderFactory.create(settings),
        store=store or ChunkStoreFactory.create(settings),
    )
    vectorizer = Vectorizer(orchestrator, VectorizationConfig.from_settings(settings))
    return Processor(
        classifier=Classifier(parser),
        text_extractor=TextExtractor(parser),
        ocr_engine=ocr_engine,
        vectorizer=vectorizer,
        governors=governors,
        config=PipelineConfig.from_settings(settings),
    )
