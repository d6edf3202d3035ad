import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from slotbook.api.v1.bookings import router as bookings_router
from slotbook.core.config import settings
from slotbook.wiring.dependencies import close_adapters, get_snapshot

class ContextFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        extras = []
        for key in ("booking_id", "slot", "schedule_id", "reason", "error"):
            value = getattr(record, key, None)
            if value not in (None, ""):
                extras.append(f"{key}={value}")
        base = super().format(record)
        if extras:
            return f"{base} | " + " ".join(extras)
        return base


handler = logging.StreamHandler()
handler.setFormatter(ContextFormatter("%(levelname)s:%(name)s:%(message)s"))

root = logging.getLogger()
root.setLevel(getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))
root.handlers.clear()
root.addHandler(handler)


@asynccontextmanager
async def lifespan(app: FastAPI):
    snapshot = get_snapshot()
    snapshot.start()
    try:
        yield
    finally:
        snapshot.stop()
        close_adapters()


app = FastAPI(title="Course Slot Booking", version="1.0.0", lifespan=lifespan)

app.include_router(bookings_router, prefix="/api/v1", tags=["bookings"])


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}
