"""
ScorePress Backend — PDF Combiner Tests
=========================================

What:  Tests for selective merging of the PDF catalog.
How:   Each fake catalog entry is a PDF whose pages have a distinctive
       width, so the merged output reveals which entry each page came from.

What we test:
    ✅ Wrong-length selections are rejected before any fetch
    ✅ All-false selection → valid PDF with zero pages
    ✅ Selected entries appear in catalog order with all their pages
    ✅ Failed or unreadable entries are skipped and reported; the rest survive
    ✅ An entry that breaks halfway through contributes none of its pages
    ✅ Flags are truthy/falsy (0/1 ints behave like booleans)
"""

import io
from types import SimpleNamespace

import pytest
from pypdf import PdfReader

from scorepress.exceptions import ValidationError
from scorepress.services import pdf_combiner
from scorepress.services.pdf_combiner import PdfCombiner


def _page_widths(data: bytes):
    reader = PdfReader(io.BytesIO(data))
    return [round(float(page.mediabox.width)) for page in reader.pages]


@pytest.fixture
def serve_catalog(upstream, catalog, make_pdf):
    """Serve catalog entry i as a 1-page PDF of width 100 + i."""
    def _serve(page_counts=None):
        for i, url in enumerate(catalog):
            count = (page_counts or {}).get(i, 1)
            upstream.add(url, content=make_pdf([100 + i] * count))
    return _serve


class TestSelectionValidation:

    @pytest.mark.asyncio
    @pytest.mark.parametrize("length", [0, 7, 9])
    async def test_wrong_length_rejected_without_fetch(self, upstream, http_client, catalog, length):
        combiner = PdfCombiner(catalog=catalog, client=http_client)

        with pytest.raises(ValidationError, match="array of length 8") as exc_info:
            await combiner.combine([True] * length)

        assert exc_info.value.context["actual_length"] == length
        assert upstream.requested == []

    @pytest.mark.asyncio
    async def test_missing_flags_rejected(self, http_client, catalog):
        with pytest.raises(ValidationError):
            await PdfCombiner(catalog=catalog, client=http_client).combine(None)

    def test_int_flags_are_truthy(self, http_client, catalog):
        combiner = PdfCombiner(catalog=catalog, client=http_client)
        assert combiner.validate_selection([1, 0, 1, 0, 0, 0, 0, 1]) == [
            True, False, True, False, False, False, False, True,
        ]


class TestCombine:

    @pytest.mark.asyncio
    async def test_nothing_selected_gives_empty_pdf(self, upstream, http_client, catalog):
        data = await PdfCombiner(catalog=catalog, client=http_client).combine([False] * 8)

        assert data.startswith(b"%PDF")
        assert _page_widths(data) == []
        assert upstream.requested == []

    @pytest.mark.asyncio
    async def test_selected_entries_in_catalog_order(self, upstream, http_client, catalog, serve_catalog):
        serve_catalog(page_counts={2: 3})
        flags = [True, False, True, False, False, False, False, False]

        data = await PdfCombiner(catalog=catalog, client=http_client).combine(flags)

        # entry 0's page, then all three of entry 2's pages
        assert _page_widths(data) == [100, 102, 102, 102]
        assert upstream.requested == [catalog[0], catalog[2]]

    @pytest.mark.asyncio
    async def test_all_selected(self, http_client, catalog, serve_catalog):
        serve_catalog()

        data = await PdfCombiner(catalog=catalog, client=http_client).combine([1] * 8)

        assert _page_widths(data) == [100 + i for i in range(8)]

    @pytest.mark.asyncio
    async def test_failed_entry_is_skipped(self, upstream, http_client, catalog, serve_catalog):
        serve_catalog()
        upstream.add(catalog[3], status=404)

        failures = []
        combiner = PdfCombiner(catalog=catalog, client=http_client, on_failure=failures.append)
        data = await combiner.combine([False, True, False, True, True, False, False, False])

        assert _page_widths(data) == [101, 104]
        assert [(f.index, f.url, f.reason) for f in failures] == [(3, catalog[3], "HTTP 404")]

    @pytest.mark.asyncio
    async def test_unreadable_entry_is_skipped(self, upstream, http_client, catalog, serve_catalog):
        serve_catalog()
        upstream.add(catalog[0], content=b"this is not a pdf")

        failures = []
        combiner = PdfCombiner(catalog=catalog, client=http_client, on_failure=failures.append)
        data = await combiner.combine([True, True] + [False] * 6)

        assert _page_widths(data) == [101]
        assert failures[0].index == 0
        assert failures[0].reason.startswith("unreadable PDF")


# Payloads the patched reader below treats as malformed documents
BROKEN_PAGE_TREE = b"%PDF-1.7 broken page tree"
HALF_VALID = b"%PDF-1.7 one good page then garbage"


@pytest.fixture
def malformed_reader(monkeypatch, make_pdf):
    """
    Replace the combiner's PdfReader so two marker payloads fail the way
    malformed real-world files do inside pypdf; everything else is parsed normally.
    """
    real_reader = pdf_combiner.PdfReader
    good_page_pdf = make_pdf([150])

    def reader(stream):
        data = stream.getvalue()
        if data == BROKEN_PAGE_TREE:
            raise AttributeError("'NameObject' object has no attribute 'items'")
        if data == HALF_VALID:
            good_page = real_reader(io.BytesIO(good_page_pdf)).pages[0]
            return SimpleNamespace(pages=[good_page, "not a page object"])
        return real_reader(stream)

    monkeypatch.setattr(pdf_combiner, "PdfReader", reader)


class TestMalformedEntries:
    """One malformed catalog entry never costs the other entries."""

    @pytest.mark.asyncio
    async def test_non_pypdf_parse_error_is_skipped(
        self, upstream, http_client, catalog, serve_catalog, malformed_reader
    ):
        serve_catalog()
        upstream.add(catalog[0], content=BROKEN_PAGE_TREE)

        failures = []
        combiner = PdfCombiner(catalog=catalog, client=http_client, on_failure=failures.append)
        data = await combiner.combine([1, 1, 0, 0, 0, 0, 0, 0])

        assert _page_widths(data) == [101]
        assert [f.index for f in failures] == [0]
        assert "AttributeError" in failures[0].reason

    @pytest.mark.asyncio
    async def test_entry_failing_midway_leaves_no_partial_pages(
        self, upstream, http_client, catalog, serve_catalog, malformed_reader
    ):
        """The first page of the bad entry was fine, but it must not be merged either."""
        serve_catalog()
        upstream.add(catalog[0], content=HALF_VALID)

        failures = []
        combiner = PdfCombiner(catalog=catalog, client=http_client, on_failure=failures.append)
        data = await combiner.combine([1, 1, 0, 0, 0, 0, 0, 0])

        assert _page_widths(data) == [101]
        assert 150 not in _page_widths(data)
        assert [f.index for f in failures] == [0]
        assert failures[0].reason.startswith("unreadable PDF")
