"""
ScorePress Backend — PDF Generator (Bucket List Booklet)
==========================================================

What:  Builds a photo booklet PDF from an ordered list of image URLs.
Why:   Backs POST /generatePDF.
How:   Fetch every image concurrently (bounded), decode them, then render
       the pages sequentially with ReportLab in request order.
Who:   Constructed per request by the /generatePDF route.

Document layout (US Letter, 612 × 792 pt):
    Page 1        Title + subtitle, centered near the top
    Page 2..N+1   One page per destination whose image could be used:
                  image fitted (aspect ratio kept) into a box of
                  half page width × half page height, centered on the page;
                  optional caption 20pt below the box, centered, 14pt

Ordering:
    Fetches complete in any order. Rendering only starts after
    asyncio.gather() has every result, and results are indexed by
    position, so page order always equals request order.

Failure policy:
    A destination whose image cannot be fetched, decoded or drawn is reported
    through the failure reporter and gets no page. The request still
    succeeds; the booklet just has fewer pages.
"""

import asyncio
import io
import logging
from typing import Iterator, List, Optional, Sequence

import httpx
from PIL import Image
from reportlab.lib.pagesizes import LETTER
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from scorepress.exceptions import GenerationError, UpstreamFetchError, ValidationError
from scorepress.schemas.pdf import Destination
from scorepress.services.fetching import (
    FailureReporter,
    FetchFailure,
    fetch_bytes,
    log_fetch_failure,
)

logger = logging.getLogger(__name__)

# Title page text
BOOKLET_TITLE = "Bucket List Adventure"
BOOKLET_SUBTITLE = "Here are some of your favorite places added to your bucket list!"

TITLE_FONT = ("Helvetica", 22)
SUBTITLE_FONT = ("Helvetica", 14)
CAPTION_FONT = ("Helvetica", 14)
TOP_MARGIN_PT = 72
CAPTION_GAP_PT = 20

STREAM_CHUNK_SIZE = 64 * 1024


def _decode_image(data: bytes) -> ImageReader:
    """
    Turn downloaded bytes into something ReportLab can draw.

    Decoding happens here, before any page is started, so a corrupt image
    can be skipped without leaving a half-drawn page behind.
    """
    image = Image.open(io.BytesIO(data))
    image.load()
    if image.mode not in ("RGB", "RGBA", "L"):
        image = image.convert("RGBA")
    reader = ImageReader(image)
    reader.getSize()
    return reader


def _image_src(destination: Destination) -> Optional[str]:
    """`{"img": null}` is a destination without an image, skipped like a bad URL."""
    return destination.img.src if destination.img is not None else None


def iter_pdf_chunks(data: bytes, chunk_size: int = STREAM_CHUNK_SIZE) -> Iterator[bytes]:
    """Yield a finished document in fixed-size chunks for StreamingResponse."""
    for start in range(0, len(data), chunk_size):
        yield data[start:start + chunk_size]


class PdfGenerator:
    """
    Renders the bucket-list booklet.

    Args:
        client: Shared httpx client (timeout configured at startup)
        concurrency: Max simultaneous image downloads for one booklet
        on_failure: Receives a FetchFailure for every skipped destination
        page_size: (width, height) in points
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        concurrency: int = 8,
        on_failure: FailureReporter = log_fetch_failure,
        page_size=LETTER,
    ):
        self.client = client
        self.concurrency = max(1, concurrency)
        self.on_failure = on_failure
        self.page_size = page_size

    async def generate(self, destinations: Optional[Sequence[Destination]]) -> bytes:
        """
        Build the booklet and return the serialized PDF.

        Raises:
            ValidationError: destinations is missing (checked before any fetch)
            GenerationError: the document itself could not be rendered
        """
        if destinations is None:
            raise ValidationError(message="Invalid destinations data", field="destinations")

        images = await self._fetch_all(destinations)
        usable = sum(1 for image in images if image is not None)
        logger.info(
            "Rendering booklet: %d of %d destinations usable",
            usable,
            len(destinations),
        )

        try:
            return self._render(destinations, images)
        except Exception as e:
            logger.error("Booklet rendering failed: %s", str(e), exc_info=True)
            raise GenerationError(
                message="Failed to generate PDF",
                context={"error_type": type(e).__name__},
            )

    async def _fetch_all(self, destinations: Sequence[Destination]) -> List[Optional[ImageReader]]:
        semaphore = asyncio.Semaphore(self.concurrency)
        tasks = [
            self._fetch_image(semaphore, index, _image_src(destination))
            for index, destination in enumerate(destinations)
        ]
        # gather preserves argument order regardless of completion order
        return list(await asyncio.gather(*tasks))

    async def _fetch_image(
        self,
        semaphore: asyncio.Semaphore,
        index: int,
        src: Optional[str],
    ) -> Optional[ImageReader]:
        async with semaphore:
            try:
                data = await fetch_bytes(self.client, src)
            except UpstreamFetchError as e:
                self.on_failure(FetchFailure(index=index, url=src, reason=e.reason))
                return None

        # Pillow raises SyntaxError, struct.error and others on corrupt files,
        # not only OSError
        try:
            return _decode_image(data)
        except Exception as e:
            self.on_failure(
                FetchFailure(
                    index=index,
                    url=src,
                    reason=f"unreadable image: {type(e).__name__}: {e}",
                )
            )
            return None

    def _render(
        self,
        destinations: Sequence[Destination],
        images: Sequence[Optional[ImageReader]],
    ) -> bytes:
        buffer = io.BytesIO()
        pdf = canvas.Canvas(buffer, pagesize=self.page_size)
        pdf.setTitle(BOOKLET_TITLE)

        # A drawn page cannot be taken back, so each destination page is tried
        # on a scratch canvas first and only drawn on the booklet if that worked
        scratch = canvas.Canvas(io.BytesIO(), pagesize=self.page_size)

        self._draw_title_page(pdf)
        pdf.showPage()

        for index, (destination, image) in enumerate(zip(destinations, images)):
            if image is None:
                continue
            caption = destination.img.alt
            try:
                self._draw_destination_page(scratch, image, caption)
            except Exception as e:
                self.on_failure(
                    FetchFailure(
                        index=index,
                        url=destination.img.src,
                        reason=f"could not draw image: {type(e).__name__}: {e}",
                    )
                )
                continue
            finally:
                scratch.showPage()

            self._draw_destination_page(pdf, image, caption)
            pdf.showPage()

        pdf.save()
        return buffer.getvalue()

    def _draw_title_page(self, pdf: canvas.Canvas) -> None:
        width, height = self.page_size
        title_y = height - TOP_MARGIN_PT - TITLE_FONT[1]
        pdf.setFont(*TITLE_FONT)
        pdf.drawCentredString(width / 2, title_y, BOOKLET_TITLE)
        pdf.setFont(*SUBTITLE_FONT)
        pdf.drawCentredString(width / 2, title_y - TITLE_FONT[1] - 6, BOOKLET_SUBTITLE)

    def _draw_destination_page(
        self,
        pdf: canvas.Canvas,
        image: ImageReader,
        caption: Optional[str],
    ) -> None:
        width, height = self.page_size
        box_width, box_height = width / 2, height / 2
        x = (width - box_width) / 2
        y = (height - box_height) / 2

        pdf.drawImage(
            image,
            x,
            y,
            width=box_width,
            height=box_height,
            preserveAspectRatio=True,
            anchor="c",
            mask="auto",
        )

        if caption:
            pdf.setFont(*CAPTION_FONT)
            pdf.drawCentredString(width / 2, y - CAPTION_GAP_PT - CAPTION_FONT[1], caption)
