"""
API 路由：单租户上传、多租户上传、配置检查
"""
from typing import Optional
from fastapi import APIRouter, Depends, File, Form, Request, UploadFile

from .config import GithubConfig
from .errors import MissingField, ValidationError
from .github_storage import check_repository, create_file
from .schemas import BranchInfo, ConfigCheckRequest, ConfigCheckResult, RepositoryInfo, UploadResult
from .uploader import (
    DEFAULT_BRANCH,
    ConfiguredTargetResolver,
    RequestTargetResolver,
    UploadRequest,
    WriteFile,
    upload_image,
)
from .validation import MAX_FILE_SIZE

router = APIRouter()


def get_github_config(request: Request) -> Optional[GithubConfig]:
    return getattr(request.app.state, "github_config", None)


def get_content_writer() -> WriteFile:
    """依赖注入：测试中替换成假的 writer"""
    return create_file


def _read_upload(upload: Optional[UploadFile]) -> UploadRequest:
    if upload is None or not upload.filename:
        raise ValidationError("No file provided")
    content = upload.file.read()
    upload.file.seek(0)
    return UploadRequest(
        content=content,
        filename=upload.filename,
        content_type=upload.content_type or "",
        size=len(content),
    )


@router.post("/api/upload", response_model=UploadResult)
def upload(
    file: Optional[UploadFile] = File(None),
    folder: Optional[str] = Form(None),
    config: Optional[GithubConfig] = Depends(get_github_config),
    write_file: WriteFile = Depends(get_content_writer),
):
    """单租户上传：仓库与 token 使用服务端配置"""
    return upload_image(
        _read_upload(file),
        ConfiguredTargetResolver(config, folder=folder),
        write_file=write_file,
    )


@router.post("/api/public-upload", response_model=UploadResult)
def public_upload(
    file: Optional[UploadFile] = File(None),
    github_token: Optional[str] = Form(None),
    github_owner: Optional[str] = Form(None),
    github_repo: Optional[str] = Form(None),
    github_branch: Optional[str] = Form(None),
    folder: Optional[str] = Form(None),
    write_file: WriteFile = Depends(get_content_writer),
):
    """多租户上传：调用方提供自己的 GitHub token 和目标仓库"""
    return upload_image(
        _read_upload(file),
        RequestTargetResolver(
            github_token=github_token,
            github_owner=github_owner,
            github_repo=github_repo,
            github_branch=github_branch,
            folder=folder,
        ),
        write_file=write_file,
    )


@router.post("/api/test-config", response_model=ConfigCheckResult)
def check_config(payload: ConfigCheckRequest):
    """只读检查 GitHub 配置：仓库是否可访问、分支是否存在"""
    token = (payload.github_token or "").strip()
    owner = (payload.github_owner or "").strip()
    repo = (payload.github_repo or "").strip()
    branch = (payload.github_branch or "").strip() or DEFAULT_BRANCH
    if not (token and owner and repo):
        raise MissingField(
            "Missing required GitHub configuration",
            extra={
                "required_fields": ["github_token", "github_owner", "github_repo"],
                "optional_fields": ["github_branch"],
            },
        )

    checked = check_repository(token, owner, repo, branch)
    repo_data = checked.repository
    return ConfigCheckResult(
        repository=RepositoryInfo(
            name=str(repo_data.get("name") or repo),
            full_name=str(repo_data.get("full_name") or f"{owner}/{repo}"),
            private=bool(repo_data.get("private")),
            default_branch=str(repo_data.get("default_branch") or ""),
            permissions=repo_data.get("permissions"),
        ),
        branch=BranchInfo(
            name=branch,
            exists=checked.branch_exists,
            note="Branch exists and is accessible" if checked.branch_exists else "Branch will be created on first upload",
        ),
    )


_UPLOAD_RESPONSE_FIELDS = {
    "success": "boolean",
    "url": "string - same as urls.raw",
    "urls": {
        "github": "string - GitHub blob URL (branch-based)",
        "raw": "string - Raw GitHub URL (branch-based)",
        "jsdelivr": "string - jsDelivr CDN URL (branch-based)",
        "github_commit": "string - GitHub blob URL (commit-based)",
        "raw_commit": "string - Raw GitHub URL (commit-based)",
        "jsdelivr_commit": "string - jsDelivr CDN URL (commit-based)",
    },
    "filename": "string",
    "size": "number",
    "type": "string",
    "commit_sha": "string",
    "github_url": "string",
}


@router.get("/api/upload")
def upload_info():
    return {
        "endpoint": "/api/upload",
        "description": "Upload an image to the repository configured on this server",
        "methods": ["POST"],
        "contentType": "multipart/form-data",
        "maxFileSize": "100MB",
        "maxFileSizeBytes": MAX_FILE_SIZE,
        "allowedTypes": ["image/*"],
        "response": _UPLOAD_RESPONSE_FIELDS,
    }


@router.get("/api/public-upload")
def public_upload_info():
    return {
        "endpoint": "/api/public-upload",
        "description": "Public API for uploading images to any GitHub repository",
        "methods": ["POST"],
        "contentType": "multipart/form-data",
        "parameters": {
            "file": {"type": "File", "required": True, "maxSize": "100MB"},
            "github_token": {"type": "string", "required": True},
            "github_owner": {"type": "string", "required": True},
            "github_repo": {"type": "string", "required": True},
            "github_branch": {"type": "string", "required": False, "default": DEFAULT_BRANCH},
            "folder": {"type": "string", "required": False, "default": "uploads"},
        },
        "response": _UPLOAD_RESPONSE_FIELDS,
    }


@router.get("/api/test-config")
def check_config_info():
    return {
        "endpoint": "/api/test-config",
        "description": "Test GitHub configuration for the public upload API",
        "methods": ["POST"],
        "contentType": "application/json",
        "parameters": {
            "github_token": {"type": "string", "required": True},
            "github_owner": {"type": "string", "required": True},
            "github_repo": {"type": "string", "required": True},
            "github_branch": {"type": "string", "required": False, "default": DEFAULT_BRANCH},
        },
    }
