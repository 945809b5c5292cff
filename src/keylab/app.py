import time

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from .api.routes import router as crypto_router
from .config import load_config
from .crypto.errors import KeylabError
from .obs.prom import prometheus_latest
from .utils.logging import get_logger

cfg = load_config()
app = FastAPI(title="keylab asymmetric cryptography demo API")
log = get_logger()

app.add_middleware(
    CORSMiddleware,
    allow_origins=cfg.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.time()
    response = await call_next(request)
    log.info("%s %s -> %d (%.1f ms)", request.method, request.url.path, response.status_code, (time.time() - start) * 1000)
    return response


@app.exception_handler(KeylabError)
async def keylab_error(request: Request, exc: KeylabError):
    log.warning("%s %s rejected: %s", request.method, request.url.path, exc.kind)
    return JSONResponse(exc.to_dict(), status_code=exc.status_code)


def _field_name(err) -> str:
    # Unparseable JSON is reported at ("body", <offset>)
    if err.get("type") == "json_invalid":
        return "body"
    return ".".join(str(p) for p in err.get("loc", ())[1:]) or "body"


@app.exception_handler(RequestValidationError)
async def validation_error(request: Request, exc: RequestValidationError):
    fields = sorted({_field_name(err) for err in exc.errors()})
    return JSONResponse(
        {
            "success": False,
            "error": "ValidationError",
            "message": f"Missing or invalid fields: {', '.join(fields)}",
            "fields": fields,
        },
        status_code=400,
    )


@app.exception_handler(Exception)
async def unexpected_error(request: Request, exc: Exception):
    log.exception("unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        {"success": False, "error": "InternalError", "message": "Internal server error"},
        status_code=500,
    )


app.include_router(crypto_router, prefix=cfg.api_prefix)


@app.get("/health")
async def health():
    return {"status": "ok", "message": "Asymmetric Cryptography API is running", "timestamp": int(time.time())}


@app.get("/__health")
async def health_short():
    return {"status": "ok"}


if cfg.metrics_enabled:
    @app.get("/metrics")
    def prometheus_metrics():
        payload, content_type = prometheus_latest()
        return Response(payload, media_type=content_type)
