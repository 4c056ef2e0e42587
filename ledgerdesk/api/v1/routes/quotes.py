# ledgerdesk/api/v1/routes/quotes.py
from ledgerdesk.api.v1.routes.documents import document_router

router = document_router("quotes", "Quotes")
