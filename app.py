import logging, re
from flask import Flask, render_template, request, abort, Response, jsonify
from werkzeug.exceptions import HTTPException
from typing import Union, Optional, Any, Dict

from config import Settings
from domain import Post
from errors import PostError, StoreError, ValidationError, ErrorKind, STATUS_BY_KIND
from logging_config import setup_logging, register_request_logging
from service import PostService, PostPage, MAX_PAGE_SIZE
from store import init_store

logger = logging.getLogger('newsdesk')


_PAGE_PATTERN = re.compile(r'[+-]?[0-9]+')
# Largest page whose offset still fits a signed 64-bit integer.
MAX_PAGE : int = (2**63 - 1) // MAX_PAGE_SIZE + 1


def parse_page(value:Optional[str]) -> int:
    if not value or _PAGE_PATTERN.fullmatch(value) is None:
        return 1
    page : int = int(value)
    return page if 0 < page <= MAX_PAGE else 1


def register_routes(app:Flask, service:PostService, page_size:int) -> None:

    def list_context() -> Dict[str, Any]:
        page : int = parse_page(request.args.get('page'))
        search : str = request.args.get('search', '')
        if search:
            result : PostPage = service.search_posts(search, page, page_size)
        else:
            result = service.get_posts(page, page_size)
        return {
            'posts': result.posts,
            'current_page': page,
            'total_pages': result.total_pages,
            'search': search,
        }

    def required_id(post_id:Optional[str]) -> str:
        if not post_id:
            logger.warning('Post ID required but not provided for %s %s', request.method, request.path)
            abort(400, description='Post ID required')
        return post_id

    @app.route('/')
    def index() -> Union[str, Any]:
        return render_template('index.html', **list_context())

    @app.route('/posts', methods=['GET'])
    def posts_list() -> Union[str, Any]:
        return render_template('posts_list.html', **list_context())

    @app.route('/posts/new')
    def show_create_form() -> Union[str, Any]:
        return render_template('post_form.html', mode='create')

    @app.route('/posts', methods=['POST'])
    def create_post() -> Union[str, Any]:
        title : str = request.form.get('title', '')
        content : str = request.form.get('content', '')
        logger.info('Creating new post title=%r', title)
        try:
            post : Post = service.create_post(title, content)
        except ValidationError as exc:
            logger.warning('Failed to create post: %s', exc.message)
            return render_template('post_form.html', mode='create', error=exc.message,
                                   title=title, content=content), 400

        response : Response = Response(render_template('post_row.html', post=post))
        response.headers['HX-Trigger'] = 'postCreated'
        response.headers['HX-Retarget'] = '#posts-body'
        response.headers['HX-Reswap'] = 'afterbegin'
        return response

    @app.route('/posts/view')
    def show_post() -> Union[str, Any]:
        post : Post = service.get_post(required_id(request.args.get('id')))
        return render_template('post_detail.html', post=post)

    @app.route('/posts/edit')
    def show_edit_form() -> Union[str, Any]:
        post : Post = service.get_post(required_id(request.args.get('id')))
        return render_template('post_form.html', mode='edit', post=post)

    @app.route('/posts', methods=['PUT'])
    def update_post() -> Union[str, Any]:
        post_id : str = required_id(request.form.get('id'))
        title : str = request.form.get('title', '')
        content : str = request.form.get('content', '')
        logger.info('Updating post id=%s title=%r', post_id, title)
        try:
            post : Post = service.update_post(post_id, title, content)
        except ValidationError as exc:
            logger.warning('Failed to update post %s: %s', post_id, exc.message)
            original : Post = service.get_post(post_id)
            return render_template('post_form.html', mode='edit', post=original, error=exc.message,
                                   title=title, content=content), 400

        response : Response = Response(render_template('post_row.html', post=post))
        response.headers['HX-Trigger'] = 'postUpdated'
        response.headers['HX-Retarget'] = f'#post-{post.id}'
        response.headers['HX-Reswap'] = 'outerHTML'
        return response

    @app.route('/posts/<post_id>', methods=['DELETE'])
    def delete_post(post_id:str) -> Union[str, Any]:
        logger.info('Deleting post id=%s', post_id)
        service.delete_post(post_id)
        return '', 200

    @app.route('/health')
    def health() -> Union[str, Any]:
        try:
            service.ping()
        except StoreError:
            return jsonify(status='unavailable'), 503
        return jsonify(status='ok')


def register_error_handlers(app:Flask) -> None:

    @app.errorhandler(PostError)
    def post_error(exc:PostError) -> Union[str, Any]:
        status : int = STATUS_BY_KIND[exc.kind]
        if exc.kind is ErrorKind.STORE:
            logger.error('Store failure on %s %s: %s', request.method, request.path, exc)
            message : str = 'Internal server error'
        elif exc.kind is ErrorKind.NOT_FOUND:
            logger.warning('Post not found on %s %s', request.method, request.path)
            message = 'Post not found'
        else:
            logger.warning('Rejected %s %s: %s', request.method, request.path, exc.message)
            message = exc.message
        return render_template('error.html', error=message, status=status), status

    @app.errorhandler(400)
    @app.errorhandler(404)
    @app.errorhandler(405)
    def http_error(exc:HTTPException) -> Union[str, Any]:
        return render_template('error.html', error=exc.description, status=exc.code), exc.code


def create_app(settings:Optional[Settings]=None) -> Flask:
    settings = settings or Settings.from_env()
    setup_logging(settings.log_level)

    app : Flask = Flask(__name__)
    app.config.update(settings.flask_config())

    service : PostService = PostService(init_store(app))
    register_request_logging(app)
    register_routes(app, service, settings.page_size_limit)
    register_error_handlers(app)
    return app


if __name__ == '__main__':
    settings : Settings = Settings.from_env()
    app : Flask = create_app(settings)
    logger.info('Newsdesk Server running on %s', settings.server_address)
    app.run(host=settings.host, port=settings.port)
