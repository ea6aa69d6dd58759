from __future__ import annotations

import logging
from typing import Callable

from github import Github

from prnotify_core.models import CommitRecord, GitHubUser, Page, PullRequestData, ReviewRecord

logger = logging.getLogger(__name__)

PAGE_SIZE = 100

_USER_FIELDS = "login resourcePath"

_COMMIT_FIELDS = f"""
        commit {{
          oid
          committer {{ user {{ {_USER_FIELDS} }} }}
          authors(first: 10) {{ nodes {{ user {{ {_USER_FIELDS} }} }} }}
        }}"""

_REVIEW_FIELDS = f"""
        state
        commit {{ oid }}
        author {{ {_USER_FIELDS} }}"""

PULL_REQUEST_QUERY = f"""
query($owner: String!, $repo: String!, $number: Int!) {{
  repository(owner: $owner, name: $repo) {{
    pullRequest(number: $number) {{
      commits(first: {PAGE_SIZE}) {{
        pageInfo {{ hasNextPage endCursor }}
        nodes {{{_COMMIT_FIELDS}
        }}
      }}
      reviews(first: {PAGE_SIZE}) {{
        pageInfo {{ hasNextPage endCursor }}
        nodes {{{_REVIEW_FIELDS}
        }}
      }}
      assignees(first: {PAGE_SIZE}) {{
        nodes {{ {_USER_FIELDS} }}
      }}
    }}
  }}
}}
"""

COMMITS_QUERY = f"""
query($owner: String!, $repo: String!, $number: Int!, $cursor: String!) {{
  repository(owner: $owner, name: $repo) {{
    pullRequest(number: $number) {{
      commits(first: {PAGE_SIZE}, after: $cursor) {{
        pageInfo {{ hasNextPage endCursor }}
        nodes {{{_COMMIT_FIELDS}
        }}
      }}
    }}
  }}
}}
"""

REVIEWS_QUERY = f"""
query($owner: String!, $repo: String!, $number: Int!, $cursor: String!) {{
  repository(owner: $owner, name: $repo) {{
    pullRequest(number: $number) {{
      reviews(first: {PAGE_SIZE}, after: $cursor) {{
        pageInfo {{ hasNextPage endCursor }}
        nodes {{{_REVIEW_FIELDS}
        }}
      }}
    }}
  }}
}}
"""


def get_github(token: str) -> Github:
    return Github(token)


def _query_pull_request(gh: Github, query: str, repo: str, pr_number: int, **variables) -> dict:
    """Run a pull-request scoped GraphQL query and return the ``pullRequest`` object.

    PyGithub raises GithubException for transport errors and for responses
    carrying a GraphQL ``errors`` array.
    """
    owner, name = repo.split("/", 1)
    _, response = gh.requester.graphql_query(
        query, {"owner": owner, "repo": name, "number": pr_number, **variables}
    )
    pr = ((response.get("data") or {}).get("repository") or {}).get("pullRequest")
    if pr is None:
        raise ValueError(f"PR #{pr_number} not found in {repo}.")
    return pr


def _to_page(connection: dict, parse: Callable[[dict], object]) -> Page:
    info = connection.get("pageInfo") or {}
    return Page(
        records=[parse(node) for node in connection.get("nodes") or []],
        has_next_page=bool(info.get("hasNextPage")),
        end_cursor=info.get("endCursor"),
    )


def fetch_pull_request(gh: Github, repo: str, pr_number: int) -> PullRequestData:
    """Fetch the PR with the first page of its commits, reviews and assignees."""
    pr = _query_pull_request(gh, PULL_REQUEST_QUERY, repo, pr_number)
    return PullRequestData(
        commits=_to_page(pr["commits"], CommitRecord.from_node),
        reviews=_to_page(pr["reviews"], ReviewRecord.from_node),
        assignees=[GitHubUser.from_node(node) for node in pr["assignees"].get("nodes") or []],
    )


def list_commits(gh: Github, repo: str, pr_number: int, cursor: str) -> Page:
    pr = _query_pull_request(gh, COMMITS_QUERY, repo, pr_number, cursor=cursor)
    return _to_page(pr["commits"], CommitRecord.from_node)


def list_reviews(gh: Github, repo: str, pr_number: int, cursor: str) -> Page:
    pr = _query_pull_request(gh, REVIEWS_QUERY, repo, pr_number, cursor=cursor)
    return _to_page(pr["reviews"], ReviewRecord.from_node)


def collect_pages(first_page: Page, fetch_next: Callable[[str], Page]) -> list:
    """Return the records of ``first_page`` plus every page that follows it."""
    records = list(first_page.records)
    page = first_page
    while page.has_next_page and page.end_cursor:
        logger.debug("Fetching next page after cursor %s", page.end_cursor)
        page = fetch_next(page.end_cursor)
        records.extend(page.records)
    return records


def post_comment(gh: Github, repo: str, pr_number: int, body: str):
    """Post ``body`` as a regular conversation comment on the pull request."""
    return gh.get_repo(repo).get_issue(pr_number).create_comment(body)
