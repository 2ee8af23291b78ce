from dotenv import load_dotenv
load_dotenv()

import os
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from timelog import __version__
from timelog.database import Base, engine
from timelog.models import *  # 모든 모델 import 후 테이블 생성
from timelog.routers import entries, analyze, analysis_documents, config, auth
from timelog.utils.responses import error_envelope

logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO"))
logger = logging.getLogger(__name__)


# FastAPI APP
app = FastAPI(
    title="Timelog",
    description="30-minute time block journal with AI day summaries",
    version=__version__,
)


# CORS 설정 (웹/모바일 클라이언트)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# 에러 응답도 {success: false, error} 형식으로 통일
@app.exception_handler(StarletteHTTPException)
def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return error_envelope(str(exc.detail), exc.status_code)


@app.exception_handler(RequestValidationError)
def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    message = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
    return error_envelope(message, 400)


@app.exception_handler(Exception)
def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return error_envelope("Internal server error", 500)


# DB 초기화
def init_db():
    logger.info("Creating DB tables...")
    Base.metadata.create_all(bind=engine)
    logger.info("DB table creation completed.")


@app.on_event("startup")
def on_startup():
    init_db()


# Router 등록
# (endpoint prefix: /api)
app.include_router(entries.router, prefix="/api/entries", tags=["Entries"])
app.include_router(analyze.router, prefix="/api/analyze", tags=["Analyze"])
app.include_router(analysis_documents.router, prefix="/api/analysis-documents", tags=["Analysis-documents"])
app.include_router(config.router, prefix="/api/config", tags=["Config"])
app.include_router(auth.router, prefix="/api/auth", tags=["Auth"])


# 기본 헬스체크용 엔드포인트
@app.get("/")
def root():
    return {"status": "ok", "message": "Backend is running."}
