"""FastAPI 애플리케이션 진입점. 미들웨어, API 라우터, 알림 스케줄러를 등록합니다."""

import logging
import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from app.config import settings
from app.database import Base, engine
import app.models  # noqa: F401 - 모델 import로 metadata 등록
from app.routers import (
    auth, users, companies, internships, applications, tasks, courses, messages, notifications,
)
from app.services.connection_registry import ConnectionRegistry
from app.services.scheduler import start_scheduler

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="인턴십 플랫폼 API",
    description="학생-기업 인턴십 매칭과 실시간 알림을 제공하는 백엔드",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# 프로세스 단위 실시간 연결 목록
app.state.connection_registry = ConnectionRegistry()
app.state.scheduler = None

# Register all routers
app.include_router(auth.router)
app.include_router(users.router)
app.include_router(companies.router)
app.include_router(internships.router)
app.include_router(applications.router)
app.include_router(tasks.router)
app.include_router(courses.router)
app.include_router(messages.router)
app.include_router(notifications.router)


@app.on_event("startup")
def on_startup():
    # 신규 기능 배포 시 누락된 테이블을 자동 생성합니다.
    Base.metadata.create_all(bind=engine)
    if settings.SCHEDULER_ENABLED:
        app.state.scheduler = start_scheduler(app.state.connection_registry)
    else:
        logger.info("[reminders] scheduler disabled")


@app.on_event("shutdown")
def on_shutdown():
    scheduler = app.state.scheduler
    if scheduler is not None:
        scheduler.shutdown(wait=False)
        app.state.scheduler = None
    app.state.connection_registry.close_all()


@app.get("/api/health")
def health_check():
    return {
        "status": "ok",
        "service": "인턴십 플랫폼 API",
        "live_connections": len(app.state.connection_registry),
    }


if __name__ == "__main__":
    # backend/ 에서 `python -m app.main` 으로 실행
    uvicorn.run("app.main:app", host="0.0.0.0", port=8000, reload=settings.DEBUG)
