import psycopg
from psycopg import sql
from psycopg.types.json import Jsonb

from docingest.database.connection import get_connection
from docingest.logging.logger import Log
from docingest.processor.models import ChunkRecord


def vector_literal(embedding: list[float]) -> str:
    """Render an embedding in pgvector's text input format."""
    return "[" + ",".join(repr(float(value)) for value in embedding) + "]"


class ChunkRepository:
    """Database operations for the chunks table (pgvector)."""

    def __init__(self, table: str = "chunks") -> None:
        self._table = table

    def insert(self, chunk: ChunkRecord) -> bool:
        """Insert one embedded chunk in its own transaction.

        Returns False instead of raising when the database rejects the row,
        so one bad chunk never takes the rest of the document with it.
        """
        if chunk.embedding is None:
            raise ValueError(f"Chunk {chunk.chunk_id} has no embedding")

        query = sql.SQL(
            """
            INSERT INTO {table} (document_id, content, embedding, metadata, chunk_index)
            VALUES (%s, %s, %s::vector, %s, %s)
            """
        ).format(table=sql.Identifier(self._table))
        metadata = {
            "chunkId": chunk.chunk_id,
            "page": chunk.page,
            "chunkIndex": chunk.chunk_index,
            "source": str(chunk.source),
            "pageQuality": str(chunk.page_quality),
            "documentName": chunk.document_name,
        }
        try:
            with get_connection() as conn:
                with conn.cursor() as cur:
                    cur.execute(
                        query,
                        (
                            chunk.document_id,
                            chunk.content,
                            vector_literal(chunk.embedding),
                            Jsonb(metadata),
                            chunk.chunk_index,
                        ),
                    )
        except psycopg.Error as exc:
            Log.error(f"Failed to insert chunk {chunk.chunk_id}: {exc}")
            return False
        return True
