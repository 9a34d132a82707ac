"""
ScorePress Backend — PDF Route Handlers
=========================================

What:  POST /generatePDF (bucket-list booklet) and POST /combine-pdfs (catalog merge).
How:   Each request builds its service from injected dependencies (shared
       httpx client, settings), awaits the finished document, then sends it.

Response semantics:
    /generatePDF streams the document in chunks (inline).
    /combine-pdfs sends it as an attachment named combined.pdf.
    Both documents are complete before the first byte goes out, so every
    failure the services raise still becomes a proper 4xx/5xx envelope.
"""

import logging

import httpx
from fastapi import APIRouter, Depends, Request
from fastapi.responses import Response, StreamingResponse

from scorepress.config import settings
from scorepress.schemas.common import ErrorResponse
from scorepress.schemas.pdf import CombinePdfsRequest, GeneratePdfRequest
from scorepress.services.pdf_combiner import COMBINED_FILENAME, PdfCombiner
from scorepress.services.pdf_generator import PdfGenerator, iter_pdf_chunks

logger = logging.getLogger(__name__)

router = APIRouter(tags=["PDF"])

PDF_RESPONSE = {"content": {"application/pdf": {}}, "description": "PDF document"}


# ── Dependencies ──────────────────────────────────────────────────────────
def get_http_client(request: Request) -> httpx.AsyncClient:
    """Shared upstream client created in the lifespan handler."""
    return request.app.state.http_client


def get_pdf_generator(client: httpx.AsyncClient = Depends(get_http_client)) -> PdfGenerator:
    return PdfGenerator(client=client, concurrency=settings.image_fetch_concurrency)


def get_pdf_combiner(client: httpx.AsyncClient = Depends(get_http_client)) -> PdfCombiner:
    return PdfCombiner(catalog=settings.pdf_catalog, client=client)


# ── Routes ────────────────────────────────────────────────────────────────
@router.post(
    "/generatePDF",
    response_class=StreamingResponse,
    responses={
        200: PDF_RESPONSE,
        400: {"description": "destinations missing or not an array", "model": ErrorResponse},
        500: {"description": "PDF generation failed", "model": ErrorResponse},
    },
    summary="Build a bucket-list booklet from image URLs",
)
async def generate_pdf(
    body: GeneratePdfRequest,
    generator: PdfGenerator = Depends(get_pdf_generator),
) -> StreamingResponse:
    """
    One title page, then one page per destination whose image loaded.
    Destinations whose image fails are skipped, not reported to the client.
    """
    pdf_bytes = await generator.generate(body.destinations)
    return StreamingResponse(
        iter_pdf_chunks(pdf_bytes),
        media_type="application/pdf",
        headers={"Content-Disposition": "inline; filename=bucket-list.pdf"},
    )


@router.post(
    "/combine-pdfs",
    response_class=Response,
    responses={
        200: PDF_RESPONSE,
        400: {"description": "checkboxStates has the wrong length", "model": ErrorResponse},
        500: {"description": "Merging failed", "model": ErrorResponse},
    },
    summary="Merge the selected catalog PDFs",
)
async def combine_pdfs(
    body: CombinePdfsRequest,
    combiner: PdfCombiner = Depends(get_pdf_combiner),
) -> Response:
    logger.info("combine-pdfs selection: %s", body.checkboxStates)
    pdf_bytes = await combiner.combine(body.checkboxStates)
    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={"Content-Disposition": f"attachment; filename={COMBINED_FILENAME}"},
    )
