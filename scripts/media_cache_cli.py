#!/usr/bin/env python3
from __future__ import annotations

"""
命令行调用缓存工具（与 /api/tools 行为一致）。

配置来源（优先级）：
1) CLI 参数：--bucket（仅桶名）
2) 环境变量：MEDIA_CACHE_STORE_ENDPOINT / MEDIA_CACHE_ACCESS_KEY_ID /
   MEDIA_CACHE_ACCESS_KEY_SECRET / MEDIA_CACHE_BUCKET / MEDIA_CACHE_BACKEND
3) Settings 配置文件：data/config.json

示例：
  python3 scripts/media_cache_cli.py store --media-url https://cdn.example.com/a.mp4
  python3 scripts/media_cache_cli.py store --media-url https://cdn.example.com/a.mp4 --source-url https://v.douyin.com/AbC123/
  python3 scripts/media_cache_cli.py exists --source-url https://v.douyin.com/AbC123/
  python3 scripts/media_cache_cli.py share "复制打开抖音 https://v.douyin.com/AbC123/ 看看"

输出为结果 JSON；success=false 时退出码为 1。
"""

import argparse
import json
import logging
import os
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from src.backend.settings.store import SettingsStore  # noqa: E402
from src.backend.tools.service import CacheToolService  # noqa: E402


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="media_cache_cli",
        description="视频缓存工具：按媒体地址/原始地址写入或查询对象存储",
    )
    p.add_argument("--config", default="data/config.json", help="Settings 配置文件路径（默认 data/config.json）")
    p.add_argument("--bucket", default="", help="桶名（可选；优先于 config/env）")
    p.add_argument("--verbose", action="store_true", help="输出 DEBUG 日志")

    sub = p.add_subparsers(dest="command", required=True)

    store = sub.add_parser("store", help="下载媒体地址并写入缓存（命中缓存则不下载）")
    store.add_argument("--media-url", required=True, help="视频直链")
    store.add_argument("--source-url", default="", help="原始地址（可选），写入指向视频目录的指针")

    exists = sub.add_parser("exists", help="按原始地址查询是否已存在视频")
    exists.add_argument("--source-url", required=True, help="原始地址")

    share = sub.add_parser("share", help="解析分享链接（或含链接的分享文案）并返回公开地址")
    share.add_argument("text", help="分享链接或分享文案")
    return p


def main() -> int:
    args = build_parser().parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    settings = SettingsStore(path=Path(args.config)).load_effective(os.environ)
    service = CacheToolService(settings)
    bucket = args.bucket or None

    if args.command == "store":
        result = service.store_media_from_locator(args.media_url, args.source_url or None, bucket)
    elif args.command == "exists":
        result = service.exists_by_source_locator(args.source_url, bucket)
    else:
        result = service.resolve_share_link(args.text, bucket)

    print(json.dumps(result.to_dict(), ensure_ascii=False, indent=2))
    return 0 if result.success else 1


if __name__ == "__main__":
    raise SystemExit(main())
