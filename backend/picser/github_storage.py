"""
GitHub Contents API 封装：提交文件、检查仓库配置
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

import requests

from .errors import AuthError, NotFoundError, UpstreamError

logger = logging.getLogger(__name__)

API_BASE = "https://api.github.com"
USER_AGENT = "Picser/1.0"


@dataclass(frozen=True)
class WriteResult:
    commit_sha: str
    html_url: Optional[str] = None


@dataclass(frozen=True)
class RepositoryCheck:
    repository: dict[str, Any]
    branch_exists: bool


def _headers(token: str) -> dict[str, str]:
    return {
        "Authorization": f"Bearer {token}",
        "Accept": "application/vnd.github+json",
        "User-Agent": USER_AGENT,
    }


def _error_message(resp: requests.Response) -> str:
    """尽量取 GitHub 返回的 message 原文"""
    try:
        data = resp.json()
    except ValueError:
        data = None
    if isinstance(data, dict) and data.get("message"):
        return str(data["message"])
    return (resp.text or "").strip() or resp.reason or f"HTTP {resp.status_code}"


def create_file(
    token: str,
    owner: str,
    repo: str,
    path: str,
    message: str,
    content_b64: str,
    branch: str,
    timeout: Optional[float] = None,
) -> WriteResult:
    """调用 create-or-update-file-contents，单次请求，不重试"""
    url = f"{API_BASE}/repos/{owner}/{repo}/contents/{path}"
    payload = {
        "message": message,
        "content": content_b64,
        "branch": branch,
    }
    try:
        resp = requests.put(url, json=payload, headers=_headers(token), timeout=timeout)
    except requests.RequestException as e:
        logger.warning(f"GitHub upload request failed for {owner}/{repo}: {e}")
        raise UpstreamError(f"Upload failed: {e}", upstream_message=str(e)) from e

    if resp.status_code == 401:
        raise AuthError("Invalid GitHub token")
    if resp.status_code == 404:
        raise NotFoundError("Repository not found or insufficient permissions")
    if not resp.ok:
        upstream = _error_message(resp)
        logger.warning(f"GitHub upload rejected ({resp.status_code}) for {owner}/{repo}/{path}: {upstream}")
        raise UpstreamError(f"Upload failed: {upstream}", upstream_message=upstream)

    data = resp.json()
    commit_sha = str((data.get("commit") or {}).get("sha") or "")
    if not commit_sha:
        raise UpstreamError("Upload failed: missing commit sha in GitHub response")
    html_url = (data.get("content") or {}).get("html_url")
    return WriteResult(commit_sha=commit_sha, html_url=html_url)


def check_repository(
    token: str,
    owner: str,
    repo: str,
    branch: str,
    timeout: Optional[float] = None,
) -> RepositoryCheck:
    """只读检查：仓库是否可访问、分支是否存在"""
    headers = _headers(token)
    try:
        resp = requests.get(f"{API_BASE}/repos/{owner}/{repo}", headers=headers, timeout=timeout)
    except requests.RequestException as e:
        raise UpstreamError(f"Test failed: {e}", upstream_message=str(e)) from e

    if resp.status_code == 401:
        raise AuthError(
            "Invalid GitHub token",
            extra={"message": "The provided GitHub token is invalid or expired"},
        )
    if resp.status_code == 404:
        raise NotFoundError(
            "Repository not found",
            extra={"message": "The repository does not exist or you do not have access to it"},
        )
    if not resp.ok:
        upstream = _error_message(resp)
        raise UpstreamError(
            f"GitHub API error: {upstream}",
            upstream_message=upstream,
            extra={"message": upstream, "status": resp.status_code},
        )

    repository = resp.json()

    # 分支不存在不算错误，只返回布尔值
    try:
        branch_resp = requests.get(
            f"{API_BASE}/repos/{owner}/{repo}/branches/{branch}",
            headers=headers,
            timeout=timeout,
        )
        branch_exists = branch_resp.ok
    except requests.RequestException as e:
        logger.warning(f"Branch check failed for {owner}/{repo}@{branch}: {e}")
        branch_exists = False

    return RepositoryCheck(repository=repository, branch_exists=branch_exists)
