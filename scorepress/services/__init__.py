# Services package init
"""
ScorePress Backend — Services Layer
=====================================

What:  Business logic between routes (HTTP) and I/O (MongoDB, remote hosts).
How:   Services receive their I/O handles (collection, httpx client) from the
       caller and return plain results or raise application exceptions.

Service Inventory:
    - StudentService: save / look up StudentDetails records
    - PdfGenerator:   bucket-list booklet from image URLs
    - PdfCombiner:    merge selected entries of the PDF catalog
    - fetching:       single-attempt downloads + per-item failure reporting

None of them import FastAPI; they are tested directly with mock handles.
"""
