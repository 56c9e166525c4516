import argparse
import json
import logging
import sys
from pathlib import Path


def _add_backend_to_path() -> None:
    repo_root = Path(__file__).resolve().parents[1]
    backend_root = repo_root / "backend"
    if str(backend_root) not in sys.path:
        sys.path.insert(0, str(backend_root))


def _load_preset(path: Path) -> dict:
    import yaml

    with open(path, encoding="utf-8") as f:
        if path.suffix.lower() == ".json":
            return json.load(f)
        return yaml.safe_load(f) or {}


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Export an iOS Xcode project from the export template."
    )
    parser.add_argument("--preset", required=True, help="导出预设（YAML/JSON，键如 application/identifier）")
    parser.add_argument("--output", required=True, help="导出路径，如 out/MyGame.ipa")
    parser.add_argument("--project-dir", default=".", help="项目根目录（res:// 对应的目录）")
    parser.add_argument("--project-name", default="", help="项目名（application/name 为空时使用）")
    parser.add_argument("--library", action="append", default=[], help="GDNative动态库（可重复）")
    parser.add_argument("--debug", action="store_true", help="调试构建")
    parser.add_argument("--no-package", action="store_true", help="只生成Xcode工程，不签名/归档/导出ipa")
    parser.add_argument("--config", default="config/iphone_export.yaml", help="运行期配置")
    args = parser.parse_args()

    _add_backend_to_path()
    from iphone_export.config import reload_config  # type: ignore
    from iphone_export.interfaces import ExportError  # type: ignore
    from iphone_export.pipeline import ExportExecutor, JobManager  # type: ignore

    config = reload_config(args.config)
    logging.basicConfig(
        level=config.logging.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    manager = JobManager(config)
    try:
        job = manager.create_job(
            Path(args.output).resolve(),
            args.debug,
            options=_load_preset(Path(args.preset)),
            libraries=args.library,
            project_dir=Path(args.project_dir).resolve(),
            project_name=args.project_name,
            build_package=not args.no_package,
        )
        ExportExecutor(config).execute(job)
    except ExportError as exc:
        print(f"导出失败: {exc}")
        return 1

    print(f"导出完成: {job.artifacts.project_file}")
    for flag in job.flags:
        print(f"  告警: {flag}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
