"""
Picser：图片上传到 GitHub 仓库并生成 CDN 永久链接
"""
