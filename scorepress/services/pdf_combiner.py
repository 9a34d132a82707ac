"""
ScorePress Backend — PDF Combiner
===================================

What:  Merges the selected entries of a fixed PDF catalog into one document.
Why:   Backs POST /combine-pdfs: the client ticks checkboxes, one per
       catalog entry, and downloads the chosen sections as a single file.
How:   Validate flags → walk the catalog in order → fetch each selected
       entry → stage all its pages → merge the staged entries → serialize.

Workflow:
    1. Validate   len(flags) == len(catalog), else ValidationError (no I/O yet)
    2. For i in 0..N-1, if flags[i] is truthy:
           fetch catalog[i] → parse → copy every page onto its own writer
           on any fetch/parse/copy failure: report, contribute nothing, continue
    3. Finalize   fresh PdfWriter, append the staged entries in order, write to bytes

Ordering:
    Catalog order is the only ordering authority. Flags select, they never
    reorder. Fetches are sequential, so the append order is simply the
    loop order.

Edge case:
    All flags false → a valid PDF with zero pages.
"""

import io
import logging
from typing import List, Optional, Sequence, Union

import httpx
from pypdf import PdfReader, PdfWriter

from scorepress.exceptions import GenerationError, UpstreamFetchError, ValidationError
from scorepress.services.fetching import (
    FailureReporter,
    FetchFailure,
    fetch_bytes,
    log_fetch_failure,
)

logger = logging.getLogger(__name__)

COMBINED_FILENAME = "combined.pdf"


class PdfCombiner:
    """
    Selective fetch-and-concatenate over an ordered catalog of PDF URLs.

    Args:
        catalog: Ordered PDF URLs; position i pairs with flag i
        client: Shared httpx client
        on_failure: Receives a FetchFailure for every selected entry that was skipped
    """

    def __init__(
        self,
        catalog: Sequence[str],
        client: httpx.AsyncClient,
        on_failure: FailureReporter = log_fetch_failure,
    ):
        self.catalog = list(catalog)
        self.client = client
        self.on_failure = on_failure

    def validate_selection(self, flags) -> List[bool]:
        """
        Check the selection flags against the catalog.

        Raises:
            ValidationError: flags missing, not a list, or wrong length
        """
        expected = len(self.catalog)
        if not isinstance(flags, (list, tuple)) or len(flags) != expected:
            actual = len(flags) if isinstance(flags, (list, tuple)) else None
            raise ValidationError(
                message=f"Invalid input: checkboxStates should be an array of length {expected}",
                field="checkboxStates",
                context={"expected_length": expected, "actual_length": actual},
            )
        return [bool(flag) for flag in flags]

    async def combine(self, flags: Sequence[Union[bool, int]]) -> bytes:
        """
        Merge the selected catalog entries and return the PDF bytes.

        Raises:
            ValidationError: flag count does not match the catalog
            GenerationError: the merged document could not be written
        """
        selection = self.validate_selection(flags)
        selected = [i for i, chosen in enumerate(selection) if chosen]
        logger.info("Combining %d of %d catalog entries: %s", len(selected), len(self.catalog), selected)

        entries: List[bytes] = []
        for index in selected:
            entry = await self._load_entry(index)
            if entry is not None:
                entries.append(entry)

        try:
            writer = PdfWriter()
            for entry in entries:
                for page in PdfReader(io.BytesIO(entry)).pages:
                    writer.add_page(page)
            page_count = len(writer.pages)
            output = io.BytesIO()
            writer.write(output)
        except Exception as e:
            logger.error("Failed to write combined PDF: %s", str(e), exc_info=True)
            raise GenerationError(
                message="Error combining PDFs",
                context={"error_type": type(e).__name__},
            )

        data = output.getvalue()
        logger.info(
            "Combined PDF ready: %d entries included, %d pages, %d bytes",
            len(entries),
            page_count,
            len(data),
        )
        return data

    async def _load_entry(self, index: int) -> Optional[bytes]:
        """
        Fetch catalog[index] and rewrite it as a standalone PDF.

        The entry is parsed, copied and serialized on its own writer, so a
        malformed file fails here as a whole and never leaves part of its
        pages in the merged document. None if the entry was skipped.
        """
        url = self.catalog[index]
        try:
            data = await fetch_bytes(self.client, url)
        except UpstreamFetchError as e:
            self.on_failure(FetchFailure(index=index, url=url, reason=e.reason))
            return None

        # pypdf raises AttributeError, TypeError, ValueError... on malformed
        # page trees, not only PyPdfError
        try:
            staged = PdfWriter()
            for page in PdfReader(io.BytesIO(data)).pages:
                staged.add_page(page)
            page_count = len(staged.pages)
            buffer = io.BytesIO()
            staged.write(buffer)
        except Exception as e:
            self.on_failure(
                FetchFailure(
                    index=index,
                    url=url,
                    reason=f"unreadable PDF: {type(e).__name__}: {e}",
                )
            )
            return None

        logger.debug("Staged %d pages from %s", page_count, url)
        return buffer.getvalue()
