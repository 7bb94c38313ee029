"""Incremental vectorization: pages -> chunks -> embeddings -> store.

Pages are handled strictly in order and each page's chunks are handed to the
embedding run as soon as they exist, so no document-wide chunk list is kept
and every stored chunk survives a crash later in the document.
"""

import time

from docingest.config.limits import VectorizationConfig
from docingest.embedding.orchestrator import EmbeddingOrchestrator
from docingest.logging.logger import Log
from docingest.processor.messages import format_message
from docingest.processor.models import (
    ExtractionSource,
    PageQuality,
    Phase,
    ProgressCallback,
    VectorizationResult,
)
from docingest.processor.progress import report
from docingest.vectorization.chunker import Chunker
from docingest.vectorization.page_splitter import split_into_pages


class Vectorizer:
    def __init__(
        self,
        orchestrator: EmbeddingOrchestrator,
        config: VectorizationConfig | None = None,
    ) -> None:
        self._orchestrator = orchestrator
        self._config = config or VectorizationConfig()

    async def vectorize(
        self,
        text: str,
        document_id: str,
        source: ExtractionSource,
        document_name: str | None = None,
        config: VectorizationConfig | None = None,
        on_progress: ProgressCallback | None = None,
    ) -> VectorizationResult:
        config = config or self._config
        started = time.monotonic()
        Log.info(f"Vectorizing document {document_id} (source={source})")

        try:
            return await self._vectorize(
                text, document_id, source, document_name, config, on_progress, started
            )
        except Exception as exc:
            Log.exception(f"Vectorization of document {document_id} failed: {exc}")
            return VectorizationResult(
                success=False,
                document_id=document_id,
                total_pages=0,
                total_chunks=0,
                processing_time_ms=int((time.monotonic() - started) * 1000),
                user_message=format_message("VECTORIZE_FAILED"),
                failure_reason=type(exc).__name__,
            )

    async def _vectorize(
        self,
        text: str,
        document_id: str,
        source: ExtractionSource,
        document_name: str | None,
        config: VectorizationConfig,
        on_progress: ProgressCallback | None,
        started: float,
    ) -> VectorizationResult:
        pages = split_into_pages(text, source, config.target_page_size)
        synthesized = any(page.quality is PageQuality.SYNTHESIZED for page in pages)
        if synthesized:
            Log.info(f"Document {document_id}: page numbers are synthesized, not authoritative")
        Log.info(f"Document {document_id}: split into {len(pages)} pages")

        chunker = Chunker(config.chunk_size, config.chunk_overlap)
        run = self._orchestrator.start(document_id, config, on_progress)
        budget = config.max_chunks_per_document
        chunks_created = 0

        for position, page in enumerate(pages, start=1):
            report(on_progress, Phase.CHUNKING, position - 1, len(pages))
            chunks = chunker.chunk_page(
                page,
                document_id,
                document_name=document_name,
                prefix_document_name=chunks_created == 0,
            )
            remaining = budget - chunks_created
            if len(chunks) > remaining:
                Log.info(
                    f"Chunk budget of {budget} reached on page {page.page_number}, "
                    f"dropping {len(chunks) - remaining} chunks"
                )
                chunks = chunks[:remaining]
            chunks_created += len(chunks)

            stored = await run.submit(chunks)
            Log.debug(
                f"Page {page.page_number}/{len(pages)}: {len(chunks)} chunks, {stored} stored"
            )
            if chunks_created >= budget:
                Log.info(f"Document {document_id}: chunk budget exhausted, stopping early")
                break

        processing_time_ms = int((time.monotonic() - started) * 1000)
        Log.info(
            f"Document {document_id}: {run.stored}/{chunks_created} chunks stored "
            f"({run.dropped} dropped, {run.store_failures} store failures) "
            f"in {processing_time_ms}ms"
        )

        if run.stored == 0:
            return VectorizationResult(
                success=False,
                document_id=document_id,
                total_pages=len(pages),
                total_chunks=0,
                processing_time_ms=processing_time_ms,
                user_message=format_message("VECTORIZE_EMPTY"),
                failure_reason="EMPTY",
                synthesized_pages=synthesized,
            )
        return VectorizationResult(
            success=True,
            document_id=document_id,
            total_pages=len(pages),
            total_chunks=run.stored,
            processing_time_ms=processing_time_ms,
            user_message=format_message(
                "VECTORIZE_SUCCESS", chunks=run.stored, pages=len(pages)
            ),
            synthesized_pages=synthesized,
        )
