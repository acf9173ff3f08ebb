import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from kasir.app.api.v1.api import api_router
from kasir.app.core.config import settings
from kasir.app.core.events import ReceiptRequested, dispatcher
from kasir.app.middleware.request_id import RequestIDMiddleware
from kasir.app.workers.tasks.receipts import enqueue_receipt

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title="Kasir POS")

# ─── CORS: storefront origins only ────────────────────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE"],
    allow_headers=["Authorization", "Content-Type", "Accept", "X-Request-ID"],
    expose_headers=["Content-Disposition", "X-Request-ID"],
)

app.add_middleware(RequestIDMiddleware)

app.include_router(api_router)

# ─── Domain events ────────────────────────────────────────────────────────────
dispatcher.subscribe(ReceiptRequested, enqueue_receipt)
