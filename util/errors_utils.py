class NotFoundError(Exception):
    """A referenced post or comment id does not resolve to a document."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


POST_NOT_FOUND = "Post not found"
COMMENT_NOT_FOUND = "Comment not found"
