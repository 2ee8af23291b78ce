import os

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base

# DB 접속 정보 (DATABASE_URL 이 있으면 우선)
DB_USER = os.getenv("DB_USER", "timelog")
DB_PASSWORD = os.getenv("DB_PASSWORD", "timelog")
DB_HOST = os.getenv("DB_HOST", "localhost")
DB_PORT = os.getenv("DB_PORT", "3306")
DB_NAME = os.getenv("DB_NAME", "timelog")

DATABASE_URL = os.getenv(
    "DATABASE_URL",
    f"mysql+pymysql://{DB_USER}:{DB_PASSWORD}@{DB_HOST}:{DB_PORT}/{DB_NAME}"
    "?charset=utf8mb4",
)


def build_engine(url: str = DATABASE_URL):
    if url.startswith("sqlite"):
        return create_engine(url, connect_args={"check_same_thread": False})

    # pool_pre_ping=True → 연결 끊김 자동 복구
    # pool_recycle=3600 → 1시간마다 재연결
    return create_engine(
        url,
        pool_pre_ping=True,
        pool_recycle=3600,
        pool_size=10,
        max_overflow=20,
    )


engine = build_engine()

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
)

Base = declarative_base()


# Dependency - API에서 DB 세션 생성/닫기
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
