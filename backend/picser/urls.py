"""
根据仓库坐标拼出六种访问链接（分支链接 + commit 固定链接）
"""
from .schemas import UploadUrls

GITHUB_BASE = "https://github.com"
RAW_BASE = "https://raw.githubusercontent.com"
JSDELIVR_BASE = "https://cdn.jsdelivr.net/gh"


def github_url(owner: str, repo: str, ref: str, path: str) -> str:
    return f"{GITHUB_BASE}/{owner}/{repo}/blob/{ref}/{path}"


def raw_url(owner: str, repo: str, ref: str, path: str) -> str:
    return f"{RAW_BASE}/{owner}/{repo}/{ref}/{path}"


def jsdelivr_url(owner: str, repo: str, ref: str, path: str) -> str:
    return f"{JSDELIVR_BASE}/{owner}/{repo}@{ref}/{path}"


def derive_urls(owner: str, repo: str, branch: str, commit_sha: str, path: str) -> UploadUrls:
    """纯函数，不访问网络，也不检查链接是否可达"""
    return UploadUrls(
        github=github_url(owner, repo, branch, path),
        raw=raw_url(owner, repo, branch, path),
        jsdelivr=jsdelivr_url(owner, repo, branch, path),
        github_commit=github_url(owner, repo, commit_sha, path),
        raw_commit=raw_url(owner, repo, commit_sha, path),
        jsdelivr_commit=jsdelivr_url(owner, repo, commit_sha, path),
    )
