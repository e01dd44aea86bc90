import logging

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from novalearn.core import config
from novalearn.core.errors import NovaLearnError
from novalearn.database import ensure_uniqueness_schema, ensure_user_schema, init_db
from novalearn.routes import admin_routes, auth_routes, course_routes, instructor_routes, student_routes

config.validate_runtime_config()

app = FastAPI(title='NovaLearn API')

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ALLOW_ORIGINS,
    allow_credentials=True,
    allow_methods=['*'],
    allow_headers=['*'],
)

logger = logging.getLogger(__name__)


@app.on_event('startup')
def initialize_database() -> None:
    try:
        init_db()
        ensure_uniqueness_schema()
        ensure_user_schema()
    except SQLAlchemyError:
        logger.exception('Database initialization failed. Check DATABASE_URL and Postgres credentials.')


@app.exception_handler(NovaLearnError)
async def handle_domain_error(request: Request, exc: NovaLearnError):
    return JSONResponse(
        status_code=exc.status_code,
        content={'detail': exc.detail, 'code': exc.code},
    )


@app.exception_handler(SQLAlchemyError)
async def handle_database_error(request: Request, exc: SQLAlchemyError):
    logger.exception('Database error on %s %s', request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={'detail': 'Database unavailable. Verify DATABASE_URL and Postgres credentials.'},
    )


@app.get('/')
def root():
    return {'status': 'NovaLearn API Running'}


app.include_router(auth_routes.router, prefix='/auth')
app.include_router(instructor_routes.router, prefix='/instructor')
app.include_router(student_routes.router, prefix='/student')
app.include_router(admin_routes.router, prefix='/admin')
app.include_router(course_routes.router, prefix='/courses')
app.include_router(course_routes.quiz_router, prefix='/quizzes')
