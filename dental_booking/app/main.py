# dental_booking/app/main.py

import logging

from fastapi import FastAPI

from .config import settings
from .routers import slots

logging.basicConfig(level=settings.resolved_log_level)

app = FastAPI(title="Dental Booking Slots API")

app.include_router(slots.router)


@app.get("/health")
def health():
    return {"status": "ok"}
