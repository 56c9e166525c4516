"""
模板解压器单元测试
"""

import os
from pathlib import Path

import pytest

from iphone_export.config import TemplateLayout
from iphone_export.interfaces import PathCreationError, TemplateIntegrityError, TemplateNotFoundError
from iphone_export.models import ExportOptions, IOSConfigData
from iphone_export.template import EntryAction, TemplateExtractor


@pytest.fixture
def extractor(layout: TemplateLayout) -> TemplateExtractor:
    return TemplateExtractor(layout)


class TestClassify:
    """条目分类测试"""

    @pytest.mark.parametrize(
        "name,action",
        [
            ("godot_ios/Info.plist", EntryAction.PARSE),
            ("godot_ios.xcodeproj/project.pbxproj", EntryAction.PARSE),
            ("godot_ios/godot.xcconfig", EntryAction.APPEND),
            ("libgodot.iphone.debug.fat.a", EntryAction.LIBRARY),
            ("libgodot_camera_module.release.fat.a", EntryAction.MODULE),
            ("godot_ios/main.m", EntryAction.COPY),
        ],
    )
    def test_classify(self, extractor: TemplateExtractor, name: str, action: EntryAction):
        assert extractor.classify(name) == action


class TestExtract:
    """解压测试"""

    def test_extract_verbatim_roundtrip(self, extractor, make_template, template_entries, out_dir, options, config_data):
        """测试普通条目仅做工程名替换后原样输出"""
        template = make_template(template_entries)
        extractor.extract(template, out_dir, options, config_data, debug=False)

        assert (out_dir / "MyGame" / "main.m").read_bytes() == template_entries["iphone/godot_ios/main.m"]
        assert (out_dir / "MyGame" / "export_options_app_store.plist").read_bytes() == b"<plist/>\n"

    def test_extract_parse(self, extractor, make_template, template_entries, out_dir, options, config_data):
        template = make_template(template_entries)
        extractor.extract(template, out_dir, options, config_data, debug=False)

        plist = (out_dir / "MyGame" / "Info.plist").read_text(encoding="utf-8")
        assert "<string>com.example.game</string>" in plist
        dummy = (out_dir / "MyGame" / "dummy.cpp").read_text(encoding="utf-8")
        assert "void register_arkit_types() { /*stub*/ };" in dummy

    def test_extract_append(self, make_template, out_dir, options, config_data):
        """测试 iphone/godot_ios.xcconfig 追加构建设置"""
        layout = TemplateLayout(files_to_append=["godot_ios.xcconfig"])
        template = make_template({
            "iphone/godot_ios.xcconfig": b"// config\n",
            "iphone/libgodot.iphone.release.fat.a": b"lib",
        })
        TemplateExtractor(layout).extract(template, out_dir, options, config_data, debug=False)

        lines = (out_dir / "MyGame.xcconfig").read_text(encoding="utf-8").splitlines()
        assert lines[0] == "// config"
        assert "PRODUCT_BUNDLE_IDENTIFIER = com.example.game;" in lines
        assert "DEVELOPMENT_TEAM = ABC123;" in lines

    @pytest.mark.parametrize("debug,content", [(True, b"\x00DEBUG-LIB"), (False, b"\x00RELEASE-LIB")])
    def test_library_variant_filter(self, extractor, make_template, template_entries, out_dir, options, config_data, debug, content):
        """测试只保留本次构建模式的引擎库"""
        template = make_template(template_entries)
        result = extractor.extract(template, out_dir, options, config_data, debug=debug)

        assert result.found_library
        library = out_dir / "MyGame.a"
        assert library.read_bytes() == content
        if os.name == "posix":
            assert library.stat().st_mode & 0o777 == 0o755
        assert not list(out_dir.glob("libgodot.iphone.*"))

    def test_missing_library_detected_after_extraction(self, extractor, make_template, template_entries, out_dir, options, config_data):
        """测试引擎库缺失：所有条目照常写出，结束后才报完整性错误"""
        del template_entries["iphone/libgodot.iphone.release.fat.a"]
        template = make_template(template_entries)

        result = extractor.extract(template, out_dir, options, config_data, debug=False)

        assert not result.found_library
        assert (out_dir / "MyGame" / "main.m").exists()
        with pytest.raises(TemplateIntegrityError):
            result.ensure_complete()

    def test_module_library_filter(self, extractor, make_template, template_entries, out_dir, config_data):
        """测试模块库按能力与构建模式保留"""
        opts = ExportOptions.from_preset({"capabilities/arkit": True})
        template = make_template(template_entries)
        result = extractor.extract(template, out_dir, opts, config_data, debug=True)

        assert (out_dir / "libgodot_arkit_module.a").read_bytes() == b"\x00ARKIT-DEBUG"
        assert not (out_dir / "libgodot_camera_module.a").exists()
        assert "iphone/libgodot_arkit_module.release.fat.a" in result.skipped
        assert "iphone/libgodot_camera_module.debug.fat.a" in result.skipped

    def test_project_file_retained(self, extractor, make_template, template_entries, out_dir, options, config_data):
        """测试工程文件保留在内存且不落盘"""
        template = make_template(template_entries)
        result = extractor.extract(template, out_dir, options, config_data, debug=False)

        assert result.project_file_data is not None
        text = result.project_file_data.decode("utf-8")
        assert "/* MyGame.app */" in text
        assert "$additional_pbx_files" in text
        assert not (out_dir / "MyGame.xcodeproj" / "project.pbxproj").exists()
        result.ensure_complete()

    def test_template_not_found(self, extractor, temp_dir, out_dir):
        with pytest.raises(TemplateNotFoundError):
            extractor.extract(temp_dir / "missing.zip", out_dir)

    def test_not_a_zip(self, extractor, temp_dir, out_dir):
        bogus = temp_dir / "bogus.zip"
        bogus.write_bytes(b"not a zip")
        with pytest.raises(TemplateNotFoundError):
            extractor.extract(bogus, out_dir)

    def test_write_failure(self, extractor, make_template, out_dir, options, config_data):
        """测试目录被同名文件占用时终止"""
        (out_dir / "MyGame").write_bytes(b"")
        template = make_template({"iphone/godot_ios/main.m": b"x"})
        with pytest.raises(PathCreationError):
            extractor.extract(template, out_dir, options, config_data)

    def test_entry_outside_destination(self, extractor, make_template, out_dir, options, config_data):
        template = make_template({"iphone/../../evil.txt": b"x"})
        with pytest.raises(PathCreationError):
            extractor.extract(template, out_dir, options, config_data)

    def test_non_utf8_parse_entry(self, extractor, make_template, template_entries, out_dir, options, config_data):
        """测试解析条目不是UTF-8时报完整性错误并带条目路径"""
        template_entries["iphone/godot_ios/Info.plist"] = b"\xff$name"
        template = make_template(template_entries)

        with pytest.raises(TemplateIntegrityError, match="iphone/godot_ios/Info.plist"):
            extractor.extract(template, out_dir, options, config_data)

    def test_non_utf8_append_entry(self, extractor, make_template, out_dir, options, config_data):
        template = make_template({"iphone/godot_ios/godot.xcconfig": b"\xfe\xff"})

        with pytest.raises(TemplateIntegrityError, match="godot.xcconfig"):
            extractor.extract(template, out_dir, options, config_data)
