# Routes package init
"""
ScorePress Backend — Routes Package
=====================================

Route modules:
    - health:   GET /, GET /health
    - students: POST /saveStudentDetails, POST /getStudentDetails
    - pdfs:     POST /generatePDF, POST /combine-pdfs

Routes stay thin: parse the body, call one service, return its result.
"""
