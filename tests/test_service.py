import pytest

from domain import Post
from errors import InvalidIDError, NotFoundError, StoreError, ValidationError
from service import PostPage, PostService
from store import PostStore


@pytest.fixture
def store(mocker):
    store = mocker.create_autospec(PostStore, instance=True)
    store.find_all.return_value = []
    store.search.return_value = []
    store.count.return_value = 0
    store.count_search.return_value = 0
    return store


@pytest.fixture
def service(store):
    return PostService(store)


def _assign_id(post):
    post.id = "507f1f77bcf86cd799439011"


class TestCreatePost:
    def test_persists_valid_post(self, service, store):
        store.create.side_effect = _assign_id

        post = service.create_post("  Title  ", "  Content  ")

        assert post.id == "507f1f77bcf86cd799439011"
        assert post.title == "Title"
        assert post.content == "Content"
        store.create.assert_called_once_with(post)

    def test_invalid_post_is_not_persisted(self, service, store):
        with pytest.raises(ValidationError) as exc:
            service.create_post("", "Content")

        assert exc.value.message == "title is required"
        store.create.assert_not_called()

    def test_store_error_propagates(self, service, store):
        store.create.side_effect = StoreError("create")

        with pytest.raises(StoreError):
            service.create_post("Title", "Content")


class TestGetPost:
    def test_delegates_to_store(self, service, store):
        expected = Post.create("Title", "Content")
        store.find_by_id.return_value = expected

        assert service.get_post("507f1f77bcf86cd799439011") is expected
        store.find_by_id.assert_called_once_with("507f1f77bcf86cd799439011")

    @pytest.mark.parametrize("error", [NotFoundError, InvalidIDError])
    def test_errors_propagate_unchanged(self, service, store, error):
        store.find_by_id.side_effect = error()

        with pytest.raises(error):
            service.get_post("whatever")


class TestGetPosts:
    @pytest.mark.parametrize(
        "page, page_size, limit, offset",
        [
            (1, 10, 10, 0),
            (2, 10, 10, 10),
            (3, 25, 25, 50),
            (0, 0, 10, 0),
            (-5, -1, 10, 0),
            (1, 150, 100, 0),
            (2, 150, 100, 100),
        ],
    )
    def test_normalizes_paging(self, service, store, page, page_size, limit, offset):
        service.get_posts(page, page_size)

        store.find_all.assert_called_once_with(limit, offset)

    @pytest.mark.parametrize(
        "total, page_size, expected",
        [(0, 10, 0), (1, 10, 1), (10, 10, 1), (11, 10, 2), (15, 10, 2), (250, 100, 3)],
    )
    def test_total_pages(self, service, store, total, page_size, expected):
        store.count.return_value = total

        result = service.get_posts(1, page_size)

        assert isinstance(result, PostPage)
        assert result.total_pages == expected

    def test_returns_store_page(self, service, store):
        posts = [Post.create(f"Post {i}", "Content") for i in range(3)]
        store.find_all.return_value = posts
        store.count.return_value = 3

        result_posts, total_pages = service.get_posts(1, 10)

        assert result_posts == posts
        assert total_pages == 1

    def test_count_error_propagates(self, service, store):
        store.count.side_effect = StoreError("count")

        with pytest.raises(StoreError):
            service.get_posts(1, 10)


class TestSearchPosts:
    def test_delegates_query_with_normalized_paging(self, service, store):
        store.count_search.return_value = 2

        result = service.search_posts("Go", 0, 150)

        store.search.assert_called_once_with("Go", 100, 0)
        store.count_search.assert_called_once_with("Go")
        assert result.total_pages == 1

    def test_search_error_propagates(self, service, store):
        store.search.side_effect = StoreError("search")

        with pytest.raises(StoreError):
            service.search_posts("Go", 1, 10)
        store.count_search.assert_not_called()


class TestUpdatePost:
    def test_updates_existing_post(self, service, store):
        existing = Post.create("Old", "Old content")
        existing.id = "507f1f77bcf86cd799439011"
        created_at = existing.created_at
        store.find_by_id.return_value = existing

        post = service.update_post(existing.id, "  New  ", "New content")

        assert post.title == "New"
        assert post.content == "New content"
        assert post.created_at == created_at
        store.update.assert_called_once_with(existing)

    def test_not_found_propagates(self, service, store):
        store.find_by_id.side_effect = NotFoundError()

        with pytest.raises(NotFoundError):
            service.update_post("507f1f77bcf86cd799439011", "Title", "Content")
        store.update.assert_not_called()

    def test_validation_error_skips_store(self, service, store):
        store.find_by_id.return_value = Post.create("Old", "Old content")

        with pytest.raises(ValidationError) as exc:
            service.update_post("507f1f77bcf86cd799439011", "Title", "")

        assert exc.value.message == "content is required"
        store.update.assert_not_called()

    def test_store_update_error_propagates(self, service, store):
        store.find_by_id.return_value = Post.create("Old", "Old content")
        store.update.side_effect = NotFoundError()

        with pytest.raises(NotFoundError):
            service.update_post("507f1f77bcf86cd799439011", "Title", "Content")


class TestDeletePost:
    def test_delegates_to_store(self, service, store):
        service.delete_post("507f1f77bcf86cd799439011")

        store.delete.assert_called_once_with("507f1f77bcf86cd799439011")

    @pytest.mark.parametrize("error", [NotFoundError, InvalidIDError, StoreError])
    def test_errors_propagate_unchanged(self, service, store, error):
        store.delete.side_effect = error("delete") if error is StoreError else error()

        with pytest.raises(error):
            service.delete_post("507f1f77bcf86cd799439011")
