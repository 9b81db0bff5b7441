"""FastAPI application exposing preflight and template generation."""

from __future__ import annotations

import asyncio
from typing import Callable, List, Optional

from fastapi import Depends, FastAPI, Header
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ..config import ForgeConfig, load_config
from ..errors import FailureKind, PublishFailure, PublishFailureReason, TemplateError
from ..logging import get_logger
from ..materializer import Materializer
from ..models import DetectionHints, PreflightResult, SourceLocator, TemplateDescriptor
from ..preflight import PreflightAnalyzer

logger = get_logger("service")


class PreflightRequest(BaseModel):
    owner: str
    repo: str
    branch: Optional[str] = None


class PreflightIssueModel(BaseModel):
    severity: str
    message: str


class DetectedFilesModel(BaseModel):
    has_package_json: bool
    has_requirements_txt: bool
    has_pyproject_toml: bool
    has_dockerfile: bool
    has_run_config: bool


class PreflightResponse(BaseModel):
    language: Optional[str] = None
    framework: Optional[str] = None
    run_command: Optional[str] = None
    confidence: float
    issues: List[PreflightIssueModel]
    detected_files: DetectedFilesModel


class TemplateRequest(BaseModel):
    owner: str
    repo: str
    default_branch: str = "main"
    language: Optional[str] = None
    framework: Optional[str] = None
    run_command: Optional[str] = None
    target_namespace: Optional[str] = None


class TemplateResponse(BaseModel):
    template_repo_url: str
    import_url: str
    template_name: str
    detected_language: str
    detected_framework: Optional[str] = None
    run_command: str


class HealthResponse(BaseModel):
    status: str


def _bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() not in {"bearer", "token"} or not token.strip():
        return None
    return token.strip()


def _status_for(exc: TemplateError) -> int:
    if exc.kind is FailureKind.CONFIGURATION:
        return 400
    if exc.kind is FailureKind.CLONE:
        return 422
    if exc.kind is FailureKind.TIMEOUT:
        return 504
    if isinstance(exc, PublishFailure) and exc.reason is PublishFailureReason.CREDENTIAL:
        return 401
    return 502


def create_app(
    config: ForgeConfig | None = None,
    *,
    materializer_factory: Callable[[ForgeConfig], Materializer] = Materializer,
    analyzer_factory: Callable[[ForgeConfig], PreflightAnalyzer] = PreflightAnalyzer,
) -> FastAPI:
    """Create the FastAPI application exposing repoforge operations."""

    settings = config or load_config()
    app = FastAPI(title="repoforge", version="0.1.0")

    async def get_materializer() -> Materializer:
        # Fresh instance per request; no state is shared between materializations.
        return materializer_factory(settings)

    async def get_analyzer() -> PreflightAnalyzer:
        return analyzer_factory(settings)

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.post("/preflight", response_model=PreflightResponse)
    async def preflight(
        payload: PreflightRequest,
        analyzer: PreflightAnalyzer = Depends(get_analyzer),
    ) -> PreflightResponse:
        def _run() -> PreflightResult:
            return analyzer.analyze(payload.owner, payload.repo, branch=payload.branch)

        loop = asyncio.get_running_loop()
        result = await loop.run_in_executor(None, _run)
        return PreflightResponse.model_validate(result.to_dict())

    @app.post("/templates", response_model=TemplateResponse)
    async def create_template(
        payload: TemplateRequest,
        authorization: Optional[str] = Header(default=None),
        materializer: Materializer = Depends(get_materializer),
    ):
        locator = SourceLocator(
            owner=payload.owner,
            repo=payload.repo,
            default_branch=payload.default_branch,
        )
        hints = DetectionHints(
            language=payload.language,
            framework=payload.framework,
            run_command=payload.run_command,
        )
        token = _bearer_token(authorization)

        def _run() -> TemplateDescriptor:
            return materializer.materialize_with_timeout(
                locator, token, payload.target_namespace, hints=hints
            )

        loop = asyncio.get_running_loop()
        try:
            descriptor = await loop.run_in_executor(None, _run)
        except TemplateError as exc:
            logger.warning("Template generation for %s failed: %s", locator.full_name, exc)
            content = {
                "detail": exc.message,
                "kind": exc.kind.value,
                "repository": exc.repository or locator.full_name,
                "fallback_url": settings.import_url(locator.full_name),
            }
            if isinstance(exc, PublishFailure):
                content["reason"] = exc.reason.value
                content["attempted_name"] = exc.attempted_name
            return JSONResponse(status_code=_status_for(exc), content=content)
        return TemplateResponse.model_validate(descriptor.to_dict())

    return app


def run_service(
    host: str = "0.0.0.0", port: int = 8000
) -> None:  # pragma: no cover - integration path
    import uvicorn

    app = create_app()
    uvicorn.run(app, host=host, port=port)


__all__ = ["create_app", "run_service"]
