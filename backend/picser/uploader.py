"""
上传流程：解析目标仓库 → 校验 → base64 编码 → 生成路径 → 提交到 GitHub → 生成链接

多租户（请求自带 token/仓库）和单租户（部署时配置）只在目标解析上不同，
其余步骤共用 upload_image。
"""
from __future__ import annotations

import base64
import logging
from dataclasses import dataclass
from typing import Callable, Optional

from .config import GithubConfig
from .errors import ConfigurationError, MissingField
from .github_storage import WriteResult, create_file
from .naming import clean_folder, generate_path
from .schemas import RepositoryTarget, UploadResult
from .urls import derive_urls
from .validation import validate_image

logger = logging.getLogger(__name__)

DEFAULT_BRANCH = "main"
DEFAULT_FOLDER = "uploads"


@dataclass(frozen=True)
class UploadRequest:
    content: bytes
    filename: str
    content_type: str
    size: int


@dataclass(frozen=True)
class RepoTarget:
    token: str
    owner: str
    repo: str
    branch: str = DEFAULT_BRANCH
    folder: str = DEFAULT_FOLDER
    timeout: Optional[float] = None


def _field(value: Optional[str]) -> str:
    return (value or "").strip()


class RequestTargetResolver:
    """多租户：token 和仓库坐标来自请求表单"""

    def __init__(
        self,
        github_token: Optional[str],
        github_owner: Optional[str],
        github_repo: Optional[str],
        github_branch: Optional[str] = None,
        folder: Optional[str] = None,
    ):
        self.github_token = github_token
        self.github_owner = github_owner
        self.github_repo = github_repo
        self.github_branch = github_branch
        self.folder = folder

    def __call__(self) -> RepoTarget:
        token = _field(self.github_token)
        owner = _field(self.github_owner)
        repo = _field(self.github_repo)
        if not (token and owner and repo):
            raise MissingField(
                "Missing required GitHub configuration: github_token, github_owner, github_repo"
            )
        return RepoTarget(
            token=token,
            owner=owner,
            repo=repo,
            branch=_field(self.github_branch) or DEFAULT_BRANCH,
            folder=_field(self.folder) or DEFAULT_FOLDER,
        )


class ConfiguredTargetResolver:
    """单租户：仓库和 token 来自启动时加载的 GithubConfig，请求只能指定 folder"""

    def __init__(self, config: Optional[GithubConfig], folder: Optional[str] = None):
        self.config = config
        self.folder = folder

    def __call__(self) -> RepoTarget:
        if self.config is None:
            raise ConfigurationError("Server GitHub configuration is missing")
        return RepoTarget(
            token=self.config.token,
            owner=self.config.owner,
            repo=self.config.repo,
            branch=self.config.branch,
            folder=_field(self.folder) or self.config.folder,
            timeout=self.config.timeout,
        )


WriteFile = Callable[..., WriteResult]


def upload_image(
    upload: UploadRequest,
    resolve_target: Callable[[], RepoTarget],
    write_file: WriteFile = create_file,
) -> UploadResult:
    target = resolve_target()
    validate_image(upload.content_type, upload.size)

    content_b64 = base64.b64encode(upload.content).decode("utf-8")
    path = generate_path(upload.filename, target.folder)

    logger.info(f"Uploading {upload.filename or 'file'} ({upload.size} bytes) to {target.owner}/{target.repo}@{target.branch}")
    written = write_file(
        token=target.token,
        owner=target.owner,
        repo=target.repo,
        path=path,
        message=f"Upload image: {upload.filename}",
        content_b64=content_b64,
        branch=target.branch,
        timeout=target.timeout,
    )
    logger.info(f"Committed {path} as {written.commit_sha}")

    urls = derive_urls(target.owner, target.repo, target.branch, written.commit_sha, path)
    return UploadResult(
        url=urls.raw,
        urls=urls,
        filename=path,
        size=upload.size,
        type=upload.content_type,
        commit_sha=written.commit_sha,
        github_url=written.html_url,
        repository=RepositoryTarget(
            owner=target.owner,
            repo=target.repo,
            branch=target.branch,
            folder=clean_folder(target.folder),
        ),
    )
