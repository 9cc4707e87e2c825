from __future__ import annotations

import logging

from fastapi import Depends, FastAPI, Request
from fastapi.responses import HTMLResponse, JSONResponse, Response
from fastapi.templating import Jinja2Templates
from starlette.concurrency import run_in_threadpool

from blog_builder.config import settings
from blog_builder.services.article_renderer import TEMPLATE_DIR
from blog_builder.services.pipeline import BlogBuilderError, BlogPipelineService


logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format='%(asctime)s | %(levelname)s | %(name)s | %(message)s',
)
logger = logging.getLogger(__name__)

CORS_HEADERS = {
    'Access-Control-Allow-Origin': '*',
    'Access-Control-Allow-Methods': 'GET, POST, OPTIONS',
    'Access-Control-Allow-Headers': 'Content-Type, Authorization',
}

app = FastAPI(title=settings.app_name)
templates = Jinja2Templates(directory=str(TEMPLATE_DIR))
service = BlogPipelineService()


def get_service() -> BlogPipelineService:
    return service


@app.middleware('http')
async def add_cors_headers(request: Request, call_next):
    response = await call_next(request)
    response.headers.update(CORS_HEADERS)
    return response


@app.get('/health')
def health() -> dict:
    return {'status': 'ok', 'env': settings.env}


@app.get('/', response_class=HTMLResponse)
def form_page(request: Request):
    return templates.TemplateResponse(request, 'form.html', {'app_name': settings.app_name})


@app.get('/api/generate')
def generate_status() -> dict:
    return {'status': 'ok', 'message': 'Blog Builder API'}


@app.options('/api/generate')
def generate_preflight() -> Response:
    return Response(status_code=204)


@app.post('/api/generate')
async def generate(request: Request, svc: BlogPipelineService = Depends(get_service)) -> JSONResponse:
    try:
        body = await request.json()
        result = await run_in_threadpool(svc.generate, body)
        return JSONResponse(result.model_dump())
    except BlogBuilderError as e:
        return JSONResponse(e.to_payload(), status_code=e.status_code)
    except Exception as e:
        logger.exception('generate failed')
        return JSONResponse({'error': str(e) or e.__class__.__name__}, status_code=500)
