from __future__ import annotations

import logging
from functools import wraps
from pathlib import Path
from typing import Callable, Dict, Optional

from flask import Blueprint, Flask, current_app, g, jsonify, request
from werkzeug.exceptions import HTTPException

import config
from errors import BlogError, ValidationError
from gate import SessionGate
from posts import PostRepository, render_content
from store import JsonDocumentStore


api = Blueprint("api", __name__)


def get_repository() -> PostRepository:
    return current_app.extensions["slateblog"]["posts"]


def get_gate() -> SessionGate:
    return current_app.extensions["slateblog"]["gate"]


def read_json() -> Dict:
    body = request.get_json(silent=True)
    if not isinstance(body, dict):
        raise ValidationError("Request body must be a JSON object")
    return body


def bearer_token() -> Optional[str]:
    header = request.headers.get("Authorization", "")
    scheme, _, credential = header.partition(" ")
    if scheme.lower() != "bearer":
        return None
    return credential.strip() or None


def login_required(view):
    @wraps(view)
    def wrapped(*args, **kwargs):
        g.principal = get_gate().verify(bearer_token())
        return view(*args, **kwargs)

    return wrapped


@api.route("/login", methods=["POST"])
def login():
    body = read_json()
    password = body.get("password")
    if not isinstance(password, str):
        raise ValidationError("Field 'password' is required")
    token = get_gate().login(password)
    return jsonify({"success": True, "token": token})


@api.route("/posts", methods=["GET"])
@login_required
def list_posts():
    return jsonify(get_repository().list())


@api.route("/posts", methods=["POST"])
@login_required
def create_post():
    post_id = get_repository().create(read_json())
    return jsonify({"success": True, "id": post_id})


@api.route("/posts/<post_id>", methods=["GET"])
@login_required
def get_post(post_id: str):
    return jsonify(get_repository().get(post_id))


@api.route("/posts/<post_id>", methods=["PUT"])
@login_required
def update_post(post_id: str):
    get_repository().update(post_id, read_json())
    return jsonify({"success": True})


@api.route("/posts/<post_id>", methods=["DELETE"])
@login_required
def delete_post(post_id: str):
    current_app.logger.info("Deleting post with ID: %s", post_id)
    get_repository().delete(post_id)
    return jsonify({"success": True})


@api.route("/blog", methods=["GET"])
def blog_index():
    return jsonify(get_repository().list_published())


@api.route("/blog/<slug>", methods=["GET"])
def blog_post(slug: str):
    post = get_repository().get_by_slug(slug)
    post["contentHtml"] = render_content(post.get("content", ""))
    return jsonify(post)


@api.app_errorhandler(BlogError)
def handle_blog_error(error: BlogError):
    if error.status_code >= 500:
        current_app.logger.error("%s %s failed: %s", request.method, request.path, error.message)
    return jsonify({"error": error.message}), error.status_code


@api.app_errorhandler(HTTPException)
def handle_http_error(error: HTTPException):
    return jsonify({"error": error.description}), error.code


@api.app_errorhandler(Exception)
def handle_unexpected_error(error: Exception):
    current_app.logger.exception("Unhandled error on %s %s", request.method, request.path)
    return jsonify({"error": "Internal server error"}), 500


def create_app(
    data_path: Optional[Path] = None,
    password: Optional[str] = None,
    token: Optional[str] = None,
    clock: Optional[Callable] = None,
) -> Flask:
    app = Flask(__name__)

    store = JsonDocumentStore(data_path or config.DATA_PATH, database=config.DATABASE_NAME)
    repo_kwargs = {"clock": clock} if clock else {}
    app.extensions["slateblog"] = {
        "posts": PostRepository(store, **repo_kwargs),
        "gate": SessionGate(
            password if password is not None else config.ADMIN_PASSWORD,
            token or config.SESSION_TOKEN,
        ),
    }
    app.register_blueprint(api)
    return app


app = create_app()


if __name__ == "__main__":
    logging.basicConfig(level=config.LOG_LEVEL)
    app.run(debug=True)
