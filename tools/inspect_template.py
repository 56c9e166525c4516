"""
导出模板检查：列出模板zip中每个条目的路由（解析/追加/引擎库/模块库/复制）。

用于排查 "引擎库缺失" 或自定义模板的标记问题。
"""

import argparse
import sys
from pathlib import Path


def _add_backend_to_path() -> None:
    repo_root = Path(__file__).resolve().parents[1]
    backend_root = repo_root / "backend"
    if str(backend_root) not in sys.path:
        sys.path.insert(0, str(backend_root))


def main() -> int:
    ap = argparse.ArgumentParser()
    ap.add_argument("--template", required=True, help="模板zip路径")
    ap.add_argument("--layout", default="", help="可选：模板布局YAML")
    ap.add_argument("--markers", action="store_true", help="同时列出解析文件中出现的标记")
    args = ap.parse_args()

    _add_backend_to_path()
    from iphone_export.config import load_layout  # type: ignore
    from iphone_export.template import MARKERS, EntryAction, TemplateExtractor, iter_entries  # type: ignore

    layout = load_layout(args.layout or None)
    extractor = TemplateExtractor(layout)

    names = set()
    for raw_name, data in iter_entries(Path(args.template)):
        name = layout.strip_prefix(raw_name)
        action = extractor.classify(name)
        names.add(name)
        print(f"{action.value:8s} {len(data):>10d}  {raw_name}")
        if args.markers and action == EntryAction.PARSE:
            text = data.decode("utf-8", errors="replace")
            used = [m for m in MARKERS if m in text]
            if used:
                print(f"{'':20s}markers: {' '.join(used)}")

    for debug in (True, False):
        library = layout.library_for(debug)
        status = "OK" if library in names else "MISSING"
        print(f"{library}: {status}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
