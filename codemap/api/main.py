import logging
from typing import Any, Dict, List

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from codemap import __version__
from codemap.config import AnalyzerConfig, configure_logging
from codemap.core.analyzer import CodeAnalyzer

# --- CONFIGURATION ---
config = AnalyzerConfig.from_env()
configure_logging(config)
logger = logging.getLogger(__name__)

analyzer = CodeAnalyzer(config)

app = FastAPI(
    title="codemap",
    description="Static analysis of JavaScript/TypeScript projects: entities, components, dependencies and metrics",
    version=__version__,
)

# Enable CORS so browser front-ends can post source files directly
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


class SourceFileModel(BaseModel):
    name: str
    content: str = ""


class AnalyzeProjectRequest(BaseModel):
    files: List[SourceFileModel]


class AnalyzeCodeRequest(BaseModel):
    code: str


@app.get("/health")
def health_check():
    return {"status": "ok"}


@app.post("/analyze")
def analyze_files(request: AnalyzeProjectRequest) -> Dict[str, Any]:
    """Analyze a batch of files; project-level failures come back in ``error``."""
    logger.info("POST /analyze with %d file(s)", len(request.files))
    result = analyzer.analyze_project(
        [(f.name, f.content) for f in request.files]
    )
    return result.to_dict()


@app.post("/analyze/code")
def analyze_single(request: AnalyzeCodeRequest) -> Dict[str, Any]:
    """Analyze one pasted snippet as ``input.js``."""
    return analyzer.analyze_code(request.code).to_dict()
