import logging
import os
from functools import lru_cache
from typing import Optional

import uvicorn
from dotenv import find_dotenv, load_dotenv
from fastapi import Depends, FastAPI, Query
from fastapi.responses import JSONResponse

from models.schema import ErrorResponse, SearchResponse
from search.config import SearchConfig
from search.errors import ClientInputError, SearchError, UpstreamFetchError
from search.service import SearchService

env_path = find_dotenv(raise_error_if_not_found=False, usecwd=True)
if env_path:
    load_dotenv(dotenv_path=env_path)

config = SearchConfig.from_env()

log_level = getattr(logging, config.log_level, logging.INFO)
logging.basicConfig(
    level=log_level if isinstance(log_level, int) else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


app = FastAPI(
    title="Search Results API",
    description="Fetches a provider results page and extracts ranked web results.",
    version="1.0.0",
)


@lru_cache(maxsize=1)
def get_service() -> SearchService:
    return SearchService.from_config(config)


def _error(status_code: int, exc: SearchError) -> JSONResponse:
    body = ErrorResponse(error=exc.message, details=exc.details)
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


@app.get(
    "/api/search",
    response_model=SearchResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    summary="Search",
    description="Returns up to 10 results for the query; never an empty list.",
    tags=["Search"],
)
def search_endpoint(
    q: Optional[str] = Query(None, description="Search query"),
    service: SearchService = Depends(get_service),
):
    try:
        output = service.search(q)
    except ClientInputError as e:
        logger.warning("Rejected request: %s", e.message)
        return _error(400, e)
    except UpstreamFetchError as e:
        logger.error("Search error for %r: %s", q, e.details)
        return _error(500, e)

    return SearchResponse.from_output(output)


@app.get("/health", summary="Health Check", tags=["Health"])
def health_check():
    return {"status": "ok"}


if __name__ == "__main__":
    port = int(os.getenv("PORT", 8000))
    logger.info("Starting Uvicorn on port %d", port)
    uvicorn.run(app, host="0.0.0.0", port=port)
