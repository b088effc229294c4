"""
FastAPI application serving the proxy routes locally.

Endpoints:
    GET /health        - Health check
    GET /soil          - Topsoil properties for lat/lon (SoilGrids or synthetic)
    GET /rain-history  - Monthly precipitation totals for lat/lon (Open-Meteo)
    GET /geocode       - Best match for a place query (Nominatim)
    GET /weather       - Current conditions for lat/lon (OpenWeather)
    GET /metrics       - Prometheus metrics

The route handlers are the same ones the serverless adapter uses.
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from src.api.handler import CORS_HEADERS, get_settings
from src.api.handlers import ProxyRequest, dispatch

# ---- App setup ----
app = FastAPI(
    title="Farm Data Proxy",
    description="Soil, rainfall, geocoding and weather proxy for the farm dashboard",
    version="1.0.0",
)


@app.middleware("http")
async def cors_and_no_store(request: Request, call_next):
    """Answer OPTIONS directly; attach CORS and no-store headers to everything."""
    if request.method == "OPTIONS":
        response = Response(status_code=200, content=b"")
    else:
        response = await call_next(request)
    response.headers.update(CORS_HEADERS)
    return response


@app.on_event("startup")
async def startup_event():
    get_settings()


def _proxy(request: Request) -> JSONResponse:
    proxy_request = ProxyRequest(
        method=request.method,
        path=request.url.path,
        query=dict(request.query_params),
    )
    status, body = dispatch(proxy_request, get_settings())
    return JSONResponse(status_code=status, content=body)


# Plain def: FastAPI runs these in its threadpool while requests blocks
@app.api_route("/health", methods=["GET", "HEAD"])
def health_check(request: Request):
    """Health check endpoint."""
    return _proxy(request)


@app.api_route("/soil", methods=["GET", "HEAD"])
def soil(request: Request):
    """Topsoil pH, nitrogen and organic matter for ?lat=&lon=."""
    return _proxy(request)


@app.api_route("/rain-history", methods=["GET", "HEAD"])
def rain_history(request: Request):
    """Monthly precipitation totals, Jan..Dec, for ?lat=&lon=."""
    return _proxy(request)


@app.api_route("/geocode", methods=["GET", "HEAD"])
def geocode(request: Request):
    """Best geocoder match for ?q=."""
    return _proxy(request)


@app.api_route("/weather", methods=["GET", "HEAD"])
def weather(request: Request):
    """Current conditions for ?lat=&lon=."""
    return _proxy(request)


# ---- Prometheus metrics endpoint ----
@app.get("/metrics")
async def metrics():
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)


@app.exception_handler(404)
async def not_found(request: Request, exc):
    return JSONResponse(status_code=404, content={"error": "Not found"})


@app.exception_handler(405)
async def method_not_allowed(request: Request, exc):
    return JSONResponse(status_code=405, content={"error": "Method not allowed"})


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
