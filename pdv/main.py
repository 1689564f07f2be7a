from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from pdv.exceptions import PdvError
from pdv.observability import RequestLoggingMiddleware, configure_logging, mark_pdv_error
from pdv.routers import pdv
from pdv.settings import settings

PDV_ERROR_STATUS = {
    "ORDER_VALIDATION_FAILED": 400,
    "ORDER_NOT_STARTED": 409,
    "STATUS_TRANSITION_DENIED": 409,
    "GATEWAY_NOT_CONFIGURED": 503,
    "GATEWAY_REQUEST_FAILED": 502,
}

configure_logging(settings.log_level)

app = FastAPI(title="PDV API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ALLOWED_ORIGINS_LIST,
    allow_methods=["*"], allow_headers=["*"], allow_credentials=True,
)
app.add_middleware(RequestLoggingMiddleware)


@app.exception_handler(PdvError)
async def pdv_error_handler(request: Request, exc: PdvError) -> JSONResponse:
    mark_pdv_error(request, exc.code)
    return JSONResponse(status_code=PDV_ERROR_STATUS.get(exc.code, 400), content={"detail": exc.as_dict()})


@app.get("/health")
def health(): return {"ok": True}

app.include_router(pdv.router)
