"""Git operations needed to find the release tag.

Usage:
    from tagrelease.git import Repository

    repo = Repository(Path("/path/to/checkout"))
    match repo.tags_at(sha):
        case Ok(tags):
            print(tags)
        case Err(e):
            print(e.message)
"""

from tagrelease.git.repository import GitError, Repository

__all__ = [
    "GitError",
    "Repository",
]
