"""
GitHub 仓库配置（单租户模式使用）
"""
from dataclasses import dataclass
import os
from typing import Optional


@dataclass(frozen=True)
class GithubConfig:
    token: str
    owner: str
    repo: str
    branch: str = "main"
    folder: str = "uploads"
    timeout: Optional[float] = None


def _parse_timeout(value: Optional[str]) -> Optional[float]:
    if value is None or not value.strip():
        return None
    try:
        timeout = float(value.strip())
    except ValueError as exc:
        raise ValueError("GITHUB_TIMEOUT must be a number") from exc
    if timeout <= 0:
        raise ValueError("GITHUB_TIMEOUT must be positive")
    return timeout


def load_github_config() -> GithubConfig:
    token = os.getenv("GITHUB_TOKEN", "").strip()
    owner = os.getenv("GITHUB_OWNER", "").strip()
    repo = os.getenv("GITHUB_REPO", "").strip()
    branch = os.getenv("GITHUB_BRANCH", "main").strip() or "main"
    folder = os.getenv("GITHUB_UPLOAD_FOLDER", "uploads").strip() or "uploads"

    missing = [key for key, value in {
        "GITHUB_TOKEN": token,
        "GITHUB_OWNER": owner,
        "GITHUB_REPO": repo,
    }.items() if not value]
    if missing:
        raise ValueError(f"Missing GitHub configuration: {', '.join(missing)}")

    return GithubConfig(
        token=token,
        owner=owner,
        repo=repo,
        branch=branch,
        folder=folder,
        timeout=_parse_timeout(os.getenv("GITHUB_TIMEOUT")),
    )
