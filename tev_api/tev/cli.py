from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path

from dotenv import load_dotenv

from tev.logging_conf import setup_logging
from tev.settings import Settings
from tev.db.repo import Repo
from tev.errors import TevError
from tev.jobs.fetch_photos import fetch_blog_photos, fix_photos
from tev.jobs.import_conversations import import_conversations
from tev.jobs.import_posts import import_posts
from tev.jobs.media_tools import clean_images, import_images
from tev.metadata import metadata_for_blog_or_default, update_metadata
from tev.posts import mark_all
from tev.xml.blog_writer import staged_post_xml

def _apply_cli_overrides(settings: Settings, args: argparse.Namespace) -> Settings:
    data = settings.__dict__.copy()

    if getattr(args, "db_url", None):
        data["db_url"] = args.db_url
    if getattr(args, "data_dir", None):
        data["data_dir"] = Path(args.data_dir)

    return Settings(**data)

def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="tev", description="Tumblr Export Viewer")
    p.add_argument("--env-file", default=".env", help="Path to .env file (default: .env)")
    p.add_argument("--log-level", default=None, help="Logging level (INFO, DEBUG, ...)")
    p.add_argument("--db-url", default=None, help="Override DB_URL (e.g., sqlite:///data/tev.db)")
    p.add_argument("--data-dir", default=None, help="Override DATA_DIR (e.g., data)")

    sub = p.add_subparsers(dest="cmd", required=True)

    sub.add_parser("init-db", help="Create DB schema")

    sub_posts = sub.add_parser("import-posts", help="Import a posts.xml export into a blog")
    sub_posts.add_argument("--blog", required=True, help="Tumblr blog (tumblelog) name")
    sub_posts.add_argument("--file", required=True, help="Path to posts.xml")

    sub_convos = sub.add_parser("import-conversations", help="Import a messages.xml export into a blog")
    sub_convos.add_argument("--blog", required=True)
    sub_convos.add_argument("--file", required=True, help="Path to messages.xml")

    sub_export = sub.add_parser("export-staged", help="Write staged posts of a blog as Tumblr XML")
    sub_export.add_argument("--blog", required=True)
    sub_export.add_argument("--out", default=None, help="Output file (default: stdout)")

    sub_mark = sub.add_parser("mark-all", help="Mark every post of a blog read (or unread)")
    sub_mark.add_argument("--blog", required=True)
    sub_mark.add_argument("--unread", action="store_true", help="Mark unread instead")

    sub_media = sub.add_parser("set-media-path", help="Set the media directory of a blog")
    sub_media.add_argument("--blog", required=True)
    sub_media.add_argument("--path", required=True)

    sub_fetch = sub.add_parser("fetch-photos", help="Download photos of a blog (or of one post)")
    sub_fetch.add_argument("--blog", required=True)
    sub_fetch.add_argument("--post-id", type=int, default=None, help="Only this post")
    sub_fetch.add_argument("--concurrency", type=int, default=None, help="Concurrent posts (default from env)")

    sub_import_img = sub.add_parser("import-images", help="Copy images into the blog's media directory")
    sub_import_img.add_argument("--blog", required=True)
    sub_import_img.add_argument("--source", required=True, help="Directory holding the images")

    sub_clean = sub.add_parser("clean-images", help="Remove duplicate / orphaned media files of a blog")
    sub_clean.add_argument("--blog", required=True)

    return p

def _print_json(data) -> None:
    print(json.dumps(data, ensure_ascii=False, indent=2))

def main(argv: list[str] | None = None) -> None:
    argv = argv if argv is not None else sys.argv[1:]
    parser = build_parser()
    args = parser.parse_args(argv)

    load_dotenv(args.env_file)
    setup_logging(args.log_level)

    settings = Settings.from_env()
    settings = _apply_cli_overrides(settings, args)

    if args.cmd == "fetch-photos":
        if args.post_id is not None:
            ok = asyncio.run(fix_photos(settings=settings, blog=args.blog, post_id=args.post_id))
            _print_json({"ok": ok, "post_id": args.post_id})
        else:
            _print_json(asyncio.run(fetch_blog_photos(settings=settings, blog=args.blog, concurrency=args.concurrency)))
        return

    repo = Repo(settings=settings)
    repo.ensure_schema()
    try:
        _run(repo, args)
    except TevError as e:
        raise SystemExit(f"error: {e.message}") from e
    finally:
        repo.close()

def _run(repo: Repo, args: argparse.Namespace) -> None:
    if args.cmd == "init-db":
        print("DB schema is ready.")
        return

    if args.cmd == "import-posts":
        with open(args.file, "rb") as f:
            _print_json(import_posts(repo, args.blog, f).to_dict())
        return

    if args.cmd == "import-conversations":
        with open(args.file, "rb") as f:
            _print_json(import_conversations(repo, args.blog, f).to_dict())
        return

    if args.cmd == "export-staged":
        xml = staged_post_xml(repo, args.blog)
        if args.out:
            Path(args.out).write_text(xml, encoding="utf-8")
            print(f"Wrote {args.out}")
        else:
            sys.stdout.write(xml)
        return

    if args.cmd == "mark-all":
        n = mark_all(repo, args.blog, not args.unread)
        print(f"Marked {n} posts of {args.blog} as {'unread' if args.unread else 'read'}")
        return

    if args.cmd == "set-media-path":
        md = metadata_for_blog_or_default(repo, args.blog)
        update_metadata(repo, md["id"], {"base_media_path": args.path})
        print(f"Media directory of {args.blog} is {args.path}")
        return

    if args.cmd == "import-images":
        _print_json(import_images(repo, args.blog, args.source))
        return

    if args.cmd == "clean-images":
        _print_json(clean_images(repo, args.blog))
        return

    raise SystemExit(f"Unknown command: {args.cmd}")
