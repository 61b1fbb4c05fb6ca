from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import uvicorn
import os
from datetime import datetime
from database import engine, Base
from crud.api.v1.endpoints import inventory, invoice, party, reports
from ledger.exceptions import LedgerError, RecordNotFound
from utils.logger import get_logger
import models  # noqa: F401  registers every table on Base.metadata

logger = get_logger("main")

app = FastAPI(title="Ledger API", version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.exception_handler(RecordNotFound)
async def record_not_found_handler(request, exc: RecordNotFound):
    return JSONResponse(status_code=404, content={"detail": str(exc)})

@app.exception_handler(LedgerError)
async def ledger_error_handler(request, exc: LedgerError):
    # validation and insufficient stock errors are client errors
    return JSONResponse(status_code=400, content={"detail": str(exc)})

@app.middleware("http")
async def exception_handling(request, call_next):
    try:
        return await call_next(request)
    except Exception as e:
        logger.exception("Error processing %s %s", request.method, request.url.path)
        return JSONResponse(
            status_code=500,
            content={"detail": f"Internal server error occurred: {str(e)}"}
        )

Base.metadata.create_all(bind=engine)

app.include_router(inventory.router, prefix="/api/v1/inventory", tags=["inventory"])
app.include_router(invoice.router, prefix="/api/v1/invoice", tags=["invoice"])
app.include_router(party.router, prefix="/api/v1/parties", tags=["parties"])
app.include_router(reports.router, prefix="/api/v1/reports", tags=["reports"])

@app.get("/health", tags=["system"])
def health_check():
    return {"status": "ok", "timestamp": datetime.now().isoformat()}

if __name__ == '__main__':
    port = int(os.environ.get("PORT", 8000))

    uvicorn.run("main:app", host="0.0.0.0", port=port, reload=False)
