import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from projectgen.api.download import router as download_router
from projectgen.api.generate import router as generate_router
from projectgen.core.artifacts import ArtifactRegistry
from projectgen.core.namespace import NamespaceFactory
from projectgen.utils.config import ALLOWED_ORIGINS, ARTIFACT_TTL_SECONDS, GENERATED_PROJECTS_DIR

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    root = Path(GENERATED_PROJECTS_DIR)
    root.mkdir(parents=True, exist_ok=True)
    app.state.generated_root = root
    app.state.artifacts = ArtifactRegistry(root, ttl_seconds=ARTIFACT_TTL_SECONDS)
    app.state.namespaces = NamespaceFactory()
    logger.info("serving generated projects from %s", root.resolve())
    yield
    app.state.artifacts.shutdown()


app = FastAPI(title="Project Generator Backend", lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_origin_regex=r"http://localhost(:\d+)?",
    allow_methods=["*"],
    allow_headers=["*"],
)
app.include_router(generate_router, prefix="/generate")
app.include_router(download_router, prefix="/download")


@app.get("/health")
def health():
    return {"status": "healthy"}
