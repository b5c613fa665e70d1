from __future__ import annotations

from github import Github

from ciguard_core.comment import CommentStore


def get_repo(repo_name: str, token: str):
    return Github(token).get_repo(repo_name)


def get_pull(repo, pr_number: int):
    return repo.get_pull(pr_number)


def review_fetcher(repo, pr_number: int):
    """Return a callable listing every review on the PR, oldest first.

    The PR is only fetched when the callable is invoked, so gate outcomes that
    never consult reviews cost no API calls.
    """

    def fetch():
        return list(get_pull(repo, pr_number).get_reviews())

    return fetch


class IssueCommentStore(CommentStore):
    """CommentStore over a PR's issue comments via PyGithub.

    Listing goes through PyGithub's PaginatedList, so PRs with more than one
    page of comments are searched completely.
    """

    def __init__(self, repo, pr_number: int):
        self._repo = repo
        self._pr_number = pr_number
        self._issue = None

    def _get_issue(self):
        if self._issue is None:
            self._issue = self._repo.get_issue(self._pr_number)
        return self._issue

    def list_comments(self) -> list:
        return list(self._get_issue().get_comments())

    def create(self, body: str) -> None:
        self._get_issue().create_comment(body)

    def update(self, comment, body: str) -> None:
        comment.edit(body)

    def delete(self, comment) -> None:
        comment.delete()
