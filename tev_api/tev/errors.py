from __future__ import annotations

from typing import Any, Optional


class TevError(Exception):
    """Base error. Carries the HTTP status the API answers with."""

    status_code: int = 500

    def __init__(self, message: str, *, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ResourceNotFoundError(TevError):
    status_code = 404

    def __init__(self, resource: str, field: str, value: Any) -> None:
        super().__init__(f"{resource} not found with {field} : '{value}'")
        self.resource = resource
        self.field = field
        self.value = value


class NoMetadataFoundError(TevError):
    status_code = 404

    def __init__(self, message: str = "No default blog metadata found") -> None:
        super().__init__(message)


class XmlParsingError(TevError):
    status_code = 400


class BlogMismatchParsingError(XmlParsingError):
    def __init__(self, blog_name: str, found_name: str) -> None:
        super().__init__(f"Document belongs to '{found_name}', not to blog '{blog_name}'")
        self.blog_name = blog_name
        self.found_name = found_name


class BlogPostMismatchError(TevError):
    status_code = 400

    def __init__(self, blog: str, post_id: Any) -> None:
        super().__init__(f"Post {post_id} does not belong to blog '{blog}'")
        self.blog = blog
        self.post_id = post_id


class NoParentPostError(TevError):
    status_code = 400

    def __init__(self, post_id: Any) -> None:
        super().__init__(f"No parent post found with id {post_id}")
        self.post_id = post_id


class InvalidConvoParentError(TevError):
    status_code = 400

    def __init__(self, blog: str, conversation_id: Any) -> None:
        super().__init__(f"Conversation {conversation_id} does not belong to blog '{blog}'")


class ExistingTagError(TevError):
    status_code = 400

    def __init__(self, tag: str) -> None:
        super().__init__(f"Hashtag '{tag}' already exists")


class InvalidTagError(TevError):
    status_code = 400


class InvalidTypeError(TevError):
    status_code = 400

    def __init__(self, type_name: str) -> None:
        super().__init__(f"Invalid post type '{type_name}'")


class InvalidMetadataError(TevError):
    status_code = 400


class UnableToDeleteMetadataError(TevError):
    status_code = 400

    def __init__(self, message: str = "Cannot delete the only remaining blog") -> None:
        super().__init__(message)


class NoStagedPostsError(TevError):
    status_code = 400

    def __init__(self, blog: str) -> None:
        super().__init__(f"No staged posts for blog '{blog}'")


class MediaError(TevError):
    """Filesystem problems while importing or exporting media.

    ``key`` names the localized message shown to API users.
    """

    def __init__(self, key: str, message: str, *, status_code: int = 400) -> None:
        super().__init__(message, status_code=status_code)
        self.key = key
