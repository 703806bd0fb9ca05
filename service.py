import logging
from typing import List, NamedTuple, Tuple

from domain import Post
from store import PostStore

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE : int = 10
MAX_PAGE_SIZE : int = 100


class PostPage(NamedTuple):
    posts : List[Post]
    total_pages : int


def normalize_paging(page:int, page_size:int) -> Tuple[int, int]:
    if page < 1:
        page = 1
    if page_size < 1:
        page_size = DEFAULT_PAGE_SIZE
    if page_size > MAX_PAGE_SIZE:
        page_size = MAX_PAGE_SIZE
    return page, page_size


def total_pages(total:int, page_size:int) -> int:
    pages : int = total // page_size
    if total % page_size:
        pages += 1
    return pages


class PostService:
    '''Business rules for posts. Store errors pass through unchanged.'''

    def __init__(self, store:PostStore) -> None:
        self.store : PostStore = store

    def create_post(self, title:str, content:str) -> Post:
        post : Post = Post.create(title, content)
        post.validate()
        self.store.create(post)
        logger.info('Created post %s', post.id)
        return post

    def get_post(self, post_id:str) -> Post:
        return self.store.find_by_id(post_id)

    def get_posts(self, page:int, page_size:int) -> PostPage:
        page, page_size = normalize_paging(page, page_size)
        offset : int = (page - 1) * page_size
        posts : List[Post] = self.store.find_all(page_size, offset)
        total : int = self.store.count()
        return PostPage(posts, total_pages(total, page_size))

    def search_posts(self, query:str, page:int, page_size:int) -> PostPage:
        page, page_size = normalize_paging(page, page_size)
        offset : int = (page - 1) * page_size
        posts : List[Post] = self.store.search(query, page_size, offset)
        total : int = self.store.count_search(query)
        return PostPage(posts, total_pages(total, page_size))

    def update_post(self, post_id:str, title:str, content:str) -> Post:
        post : Post = self.store.find_by_id(post_id)
        post.update(title, content)
        post.validate()
        self.store.update(post)
        logger.info('Updated post %s', post.id)
        return post

    def delete_post(self, post_id:str) -> None:
        self.store.delete(post_id)
        logger.info('Deleted post %s', post_id)

    def ping(self) -> None:
        self.store.ping()
