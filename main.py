from fastapi import FastAPI, Depends, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pymongo import ASCENDING
from pymongo.errors import PyMongoError
import asyncio
import logging
import traceback
import sys

from env import PORT, DEVELOPMENT_MODE, Settings, get_settings
from models.comments import CommentCreateRequest, CommentUpdateRequest, LikeRequest
from services import posts_services, comments_services
from util.errors_utils import NotFoundError
from util.models_utils import serialize_document, serialize_documents
from util.mongodb_utils import get_async_database, COMMENTS_COLLECTION


# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.StreamHandler(stream=sys.stdout)
    ]
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Forum API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["OPTIONS", "GET", "HEAD", "PUT", "PATCH", "POST", "DELETE"],
    allow_headers=["*"],
)


def get_db(request: Request):
    return request.app.state.db


async def ensure_indexes(db):
    try:
        name = await db[COMMENTS_COLLECTION].create_index([("postId", ASCENDING)])
        logger.info(f"Ensured index {name} on {COMMENTS_COLLECTION}")
    except PyMongoError as e:
        logger.error(f"Error creating index: {e}")


@app.on_event("startup")
async def startup_event():
    app.state.db = get_async_database()
    app.state.index_task = asyncio.create_task(ensure_indexes(app.state.db))
    logger.info("Forum API started")


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    return JSONResponse(status_code=404, content={"message": exc.message})


@app.exception_handler(PyMongoError)
async def store_failure_handler(request: Request, exc: PyMongoError):
    logger.error(f"Store failure on {request.method} {request.url.path}: {str(exc)}")
    logger.error("".join(traceback.format_exception(type(exc), exc, exc.__traceback__)))
    return JSONResponse(status_code=500, content={"message": str(exc)})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {str(exc)}")
    logger.error("".join(traceback.format_exception(type(exc), exc, exc.__traceback__)))
    return JSONResponse(status_code=500, content={"message": str(exc)})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    fields = ", ".join(".".join(str(part) for part in error["loc"]) for error in errors)
    return JSONResponse(
        status_code=422,
        content={"message": f"Invalid request: {fields}", "errors": jsonable_encoder(errors)}
    )


# Posts

@app.get("/posts")
async def list_posts(db=Depends(get_db)):
    return serialize_documents(await posts_services.list_posts(db))


@app.post("/posts/recount-comments")
async def recount_comments(db=Depends(get_db)):
    """Recompute every post's commentCount from the comments collection."""
    counts = await posts_services.recount_comments(db)
    return {"message": f"Recounted comments for {len(counts)} posts", "counts": counts}


@app.get("/posts/{post_id}")
async def get_post(post_id: str, db=Depends(get_db)):
    return serialize_document(await posts_services.get_post(db, post_id))


@app.get("/posts/{post_id}/comments")
async def list_post_comments(post_id: str, db=Depends(get_db)):
    return serialize_documents(await comments_services.list_comments_for_post(db, post_id))


# Comments

@app.get("/comments")
async def list_comments(db=Depends(get_db), settings: Settings = Depends(get_settings)):
    if not settings.unscoped_comments_enabled:
        raise NotFoundError("Not found")
    return serialize_documents(await comments_services.list_all_comments(db))


@app.get("/comments/{comment_id}")
async def get_comment(comment_id: str, db=Depends(get_db)):
    return serialize_document(await comments_services.get_comment(db, comment_id))


@app.post("/comments", status_code=201)
async def create_comment(body: CommentCreateRequest, db=Depends(get_db)):
    comment = await comments_services.create_comment(db, body.author, body.text, body.postId)
    return serialize_document(comment)


@app.patch("/comments/{comment_id}")
async def update_comment(comment_id: str, body: CommentUpdateRequest, db=Depends(get_db)):
    return serialize_document(await comments_services.update_comment_text(db, comment_id, body.text))


@app.delete("/comments/{comment_id}")
async def delete_comment(comment_id: str, db=Depends(get_db)):
    await comments_services.delete_comment(db, comment_id)
    return {"message": "Comment deleted"}


@app.post("/comments/{comment_id}/like")
async def like_comment(comment_id: str, body: LikeRequest, db=Depends(get_db)):
    return serialize_document(await comments_services.like_comment(db, comment_id, body.userId))


@app.post("/comments/{comment_id}/unlike")
async def unlike_comment(comment_id: str, body: LikeRequest, db=Depends(get_db)):
    return serialize_document(await comments_services.unlike_comment(db, comment_id, body.userId))


# Seed data

@app.get("/generate-posts", status_code=201)
async def generate_posts(db=Depends(get_db), settings: Settings = Depends(get_settings)):
    """
    Replace all posts with the fixed sample set.
    Destructive; disable with GENERATE_POSTS_ENABLED=false outside demos.
    """
    if not settings.generate_posts_enabled:
        raise NotFoundError("Not found")
    count = await posts_services.reseed_posts(db, include_title=settings.post_title_enabled)
    return {"message": "Posts generated and added to the database", "count": count}


if __name__ == "__main__":

    import uvicorn
    uvicorn.run("main:app", host="0.0.0.0", port=PORT, reload=DEVELOPMENT_MODE)
