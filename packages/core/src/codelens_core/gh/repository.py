"""GitHub repository intake: parse a URL, list code files, fetch contents.

All listing and content calls go through PyGithub. A non-success status is
turned into RemoteFetchFailed with the status and the repository name in the
message; nothing is retried.
"""

from __future__ import annotations

import base64
import binascii
import logging
import re
from concurrent.futures import ThreadPoolExecutor, as_completed

import requests
from github import Github, GithubException, RateLimitExceededException

from codelens_core.errors import DecodeFailed, RemoteFetchFailed
from codelens_core.languages import classify
from codelens_core.models import CodeFile, RepoRef, SourceFile

logger = logging.getLogger(__name__)

_REPO_URL_RE = re.compile(r"^https://github\.com/([A-Za-z0-9_.-]+)/([A-Za-z0-9_.-]+?)(?:\.git)?(?:/.*)?$")

_DEFAULT_MAX_WORKERS = 8


def parse_repo_ref(url: str) -> RepoRef | None:
    """Parse ``https://github.com/<owner>/<repo>[/...]`` into a RepoRef.

    Surrounding whitespace, a trailing slash, extra path segments and a
    ``.git`` suffix are tolerated. Any other shape returns None.
    """
    match = _REPO_URL_RE.match(url.strip())
    if not match:
        return None
    owner, repo = match.groups()
    if owner in (".", "..") or repo in (".", ".."):
        return None
    return RepoRef(owner=owner, repo=repo)


def _describe(e: Exception, action: str, repo_name: str) -> str:
    if isinstance(e, GithubException):
        data = e.data if isinstance(e.data, dict) else {}
        detail = data.get("message") or str(e)
        hint = ""
        if isinstance(e, RateLimitExceededException) or (e.status in (403, 429) and "rate limit" in detail.lower()):
            hint = " GitHub API rate limit exceeded; set GITHUB_TOKEN for a higher limit."
        elif e.status == 404:
            hint = " Repository, branch or file not found (private repositories need GITHUB_TOKEN)."
        return f"GitHub API error {e.status} while {action} {repo_name}: {detail}.{hint}"
    return f"Network error while {action} {repo_name}: {e}"


def get_repo(ref: RepoRef, token: str | None = None):
    try:
        return Github(token).get_repo(ref.full_name)
    except (GithubException, requests.RequestException) as e:
        raise RemoteFetchFailed(_describe(e, "opening", ref.full_name)) from e


def list_files(repo) -> list[CodeFile]:
    """List classifiable blobs in the default branch's recursive tree."""
    try:
        tree = repo.get_git_tree(repo.default_branch, recursive=True)
    except (GithubException, requests.RequestException) as e:
        raise RemoteFetchFailed(_describe(e, "listing files of", repo.full_name)) from e

    files = []
    for element in tree.tree:
        if element.type != "blob":
            continue
        language = classify(element.path)
        if language is None:
            continue
        files.append(CodeFile(path=element.path, language=language))
    logger.debug("Listed %d code file(s) in %s", len(files), repo.full_name)
    return files


def decode_content(encoded: str | None, encoding: str | None, path: str) -> str:
    """Strictly decode a base64 content payload into text.

    Binary data is reported, not guessed at: invalid base64, non-UTF-8 bytes
    or embedded NUL bytes all raise DecodeFailed.
    """
    if encoding != "base64":
        raise DecodeFailed(f"Unsupported encoding {encoding!r} for {path} (file may be too large or not a file).")
    try:
        raw = base64.b64decode("".join((encoded or "").split()), validate=True)
    except (binascii.Error, ValueError) as e:
        raise DecodeFailed(f"Content of {path} is not valid base64.") from e
    try:
        text = raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise DecodeFailed(f"Content of {path} is not valid UTF-8 text (binary file?).") from e
    if "\x00" in text:
        raise DecodeFailed(f"Content of {path} looks binary.")
    return text


def fetch_content(repo, path: str) -> str:
    try:
        contents = repo.get_contents(path)
    except (GithubException, requests.RequestException) as e:
        raise RemoteFetchFailed(_describe(e, f"fetching {path} from", repo.full_name)) from e
    if isinstance(contents, list):
        raise DecodeFailed(f"{path} is a directory, not a file.")
    return decode_content(contents.content, contents.encoding, path)


def fetch_all(repo, files: list[CodeFile], max_workers: int = _DEFAULT_MAX_WORKERS) -> list[SourceFile]:
    """Fetch every file's content concurrently, all or nothing.

    The first failure cancels the fetches that have not started and is
    re-raised; results already fetched are discarded. On success the result
    order matches ``files``.
    """
    if not files:
        return []
    results: list[SourceFile | None] = [None] * len(files)
    with ThreadPoolExecutor(max_workers=max(1, min(max_workers, len(files)))) as executor:
        futures = {executor.submit(fetch_content, repo, f.path): i for i, f in enumerate(files)}
        try:
            for future in as_completed(futures):
                index = futures[future]
                results[index] = SourceFile(path=files[index].path, content=future.result())
        except BaseException:
            for pending in futures:
                pending.cancel()
            raise
    return [r for r in results if r is not None]
